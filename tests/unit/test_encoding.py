import base64
import json
from dataclasses import dataclass, field
from urllib.parse import parse_qsl, urlsplit

import pytest
from pydantic import BaseModel, TypeAdapter

from aiorest.encoding import BodyEncoder, EncodedBody, new_boundary, to_pairs
from aiorest.errors import EncodingError
from aiorest.headers import HeaderBuilder, HeaderConfig
from aiorest.types import EMPTY, ContentType

PNG = b"\x89PNG\r\n\x1a\n\x00\x01\xff"


@dataclass
class Search:
    q: str
    tags: list[str] = field(default_factory=list)
    limit: int = 10


class Profile(BaseModel):
    name: str
    age: int
    admin: bool = False


def fixed_encoder(config: HeaderConfig | None = None) -> BodyEncoder:
    return BodyEncoder(HeaderBuilder(config or HeaderConfig()), lambda: "BOUNDARY")


class TestJson:
    @pytest.mark.parametrize(
        "value,type_",
        [
            (Search("shoes", ["red", "blue"], 3), Search),
            (Profile(name="ada", age=36, admin=True), Profile),
            ({"a": [1, 2, {"b": None}], "c": "ü"}, dict),
            ([1.5, "x", True], list),
        ],
    )
    def test_round_trip(self, value: object, type_: type) -> None:
        encoded = fixed_encoder().encode(ContentType.json, value)
        assert encoded.header.value == "application/json; charset=utf-8"
        assert encoded.body is not None
        assert TypeAdapter(type_).validate_json(encoded.body) == value

    def test_unserializable_value(self) -> None:
        with pytest.raises(EncodingError, match="cannot encode"):
            fixed_encoder().encode(ContentType.json, {"lock": object()})

    def test_empty_parameters(self) -> None:
        for empty in (EMPTY, None):
            encoded = fixed_encoder().encode(ContentType.json, empty)
            assert encoded == EncodedBody(HeaderBuilder().json_header(), None)


class TestForm:
    def test_encodes_pairs(self) -> None:
        encoded = fixed_encoder().encode(
            ContentType.form_urlencoded,
            {"name": "a b&c", "tags": ["x", "y", "x"], "n": 1, "ok": True},
        )
        assert encoded.header.value == "application/x-www-form-urlencoded"
        assert encoded.body == b"name=a%20b%26c&tags=x&tags=y&tags=x&n=1&ok=true"

    def test_dataclass_fields(self) -> None:
        encoded = fixed_encoder().encode(
            ContentType.form_urlencoded, Search("tea", ["green"])
        )
        assert encoded.body is not None
        assert parse_qsl(encoded.body.decode()) == [
            ("q", "tea"),
            ("tags", "green"),
            ("limit", "10"),
        ]

    def test_non_object_parameters(self) -> None:
        with pytest.raises(EncodingError, match="JSON object"):
            fixed_encoder().encode(ContentType.form_urlencoded, ["a", "b"])


@pytest.mark.parametrize(
    "fields,pairs",
    [
        ({"q": ["a", "b"]}, [("q", "a"), ("q", "b")]),
        ({"q": []}, []),
        ({"q": [1, 2]}, [("q", "[1,2]")]),
        ({"q": None, "f": 1.5}, [("q", "null"), ("f", "1.5")]),
        ({"q": {"k": "v"}}, [("q", '{"k":"v"}')]),
    ],
)
def test_to_pairs(fields: dict[str, object], pairs: list[tuple[str, str]]) -> None:
    assert to_pairs(fields) == pairs


class TestMultipart:
    def test_single_part(self) -> None:
        encoded = fixed_encoder().encode(
            ContentType.multipart, {"photo": base64.b64encode(PNG).decode()}
        )
        assert encoded.header.value == "multipart/form-data; boundary=BOUNDARY"
        assert encoded.body == (
            b"\r\n--BOUNDARY\r\n"
            b'Content-Disposition: form-data; name="photo"; filename="photo.png"\r\n'
            b"Content-Type: image/png\r\n\r\n" + PNG + b"\r\n--BOUNDARY--"
        )

    def test_parts_follow_field_order(self) -> None:
        body = fixed_encoder().encode(
            ContentType.multipart,
            {
                "front": base64.b64encode(b"1").decode(),
                "back": base64.b64encode(b"2").decode(),
            },
        ).body
        assert body is not None
        assert body.count(b"\r\n--BOUNDARY\r\n") == 2
        assert body.index(b'name="front"') < body.index(b'name="back"')
        assert body.endswith(b"--BOUNDARY--")

    def test_configured_part_metadata(self) -> None:
        config = HeaderConfig(part_content_type="image/jpeg", part_extension="jpg")
        body = fixed_encoder(config).encode(
            ContentType.multipart, {"a": base64.b64encode(b"x").decode()}
        ).body
        assert body is not None
        assert b'filename="a.jpg"' in body
        assert b"Content-Type: image/jpeg\r\n" in body

    @pytest.mark.parametrize("value", ["not base64!", "abc", 42, ["aGk="]])
    def test_rejects_non_base64_fields(self, value: object) -> None:
        with pytest.raises(EncodingError, match="multipart field 'photo'"):
            fixed_encoder().encode(ContentType.multipart, {"photo": value})

    @pytest.mark.parametrize("key", ['ph"oto', "photo\r\nX-Evil: 1", "photo\n"])
    def test_rejects_unsafe_field_names(self, key: str) -> None:
        with pytest.raises(EncodingError, match="cannot contain quotes or line breaks"):
            fixed_encoder().encode(
                ContentType.multipart, {key: base64.b64encode(PNG).decode()}
            )

    def test_fresh_boundary_per_request(self) -> None:
        encoder = BodyEncoder()
        first = encoder.encode(ContentType.multipart, EMPTY).header.value
        second = encoder.encode(ContentType.multipart, EMPTY).header.value
        assert first != second

    def test_boundary_format(self) -> None:
        boundary = new_boundary()
        assert len(boundary) == 36
        assert boundary == boundary.upper()


class TestQuery:
    def test_repeated_array_parameters(self) -> None:
        url = BodyEncoder().query("http://x/search", {"q": ["a", "b"]})
        parts = urlsplit(url)
        assert parts.path == "/search"
        assert sorted(parse_qsl(parts.query)) == [("q", "a"), ("q", "b")]

    def test_keeps_existing_query(self) -> None:
        url = BodyEncoder().query("http://x/search?page=2", {"q": "tea"})
        assert sorted(parse_qsl(urlsplit(url).query)) == [("page", "2"), ("q", "tea")]

    def test_percent_encoding(self) -> None:
        url = BodyEncoder().query("http://x/", {"q": "a/b c"})
        assert url == "http://x/?q=a%2Fb%20c"

    @pytest.mark.parametrize("parameters", [EMPTY, None, {}, {"q": []}])
    def test_no_query(self, parameters: object) -> None:
        assert BodyEncoder().query("http://x/search", parameters) == "http://x/search"

    def test_unencodable_parameters(self) -> None:
        with pytest.raises(EncodingError):
            BodyEncoder().query("http://x/", json)
