"""Tests for choosing and producing the request body encoding."""

from urllib.parse import parse_qsl

from mailrelay.email import Attachment, Email
from mailrelay.providers.mailgun import encode_body, prepare_payload

URL = "https://api.mailgun.net/v3/avengers.com/messages"


class TestFormEncoding:

    def test_content_type(self, simple_email):
        encoded = encode_body(URL, prepare_payload(simple_email))
        assert encoded.content_type == "application/x-www-form-urlencoded"

    def test_body_decodes_to_fields(self, full_email):
        payload = prepare_payload(full_email)
        encoded = encode_body(URL, payload)
        decoded = dict(parse_qsl(encoded.body.decode(), keep_blank_values=True))
        assert decoded == payload.fields()

    def test_content_length_matches_body(self, full_email):
        encoded = encode_body(URL, prepare_payload(full_email))
        assert encoded.content_length == len(encoded.body)

    def test_keys_percent_encoded(self, simple_email):
        simple_email.put_reply_to("office@x.com")
        encoded = encode_body(URL, prepare_payload(simple_email))
        assert b"h%3AReply-To=office%40x.com" in encoded.body

    def test_tags_repeat_the_key(self, simple_email):
        simple_email.put_provider_option("tags", ["a", "b"])
        encoded = encode_body(URL, prepare_payload(simple_email))
        pairs = parse_qsl(encoded.body.decode())
        assert [v for k, v in pairs if k == "o:tag"] == ["a", "b"]

    def test_no_attachment_keys(self, simple_email):
        encoded = encode_body(URL, prepare_payload(simple_email))
        keys = {k for k, _ in parse_qsl(encoded.body.decode())}
        assert "attachment" not in keys
        assert "inline" not in keys


class TestMultipartEncoding:

    def test_content_type_has_boundary(self, simple_email):
        simple_email.attachment(Attachment.from_data(b"hello", "a.txt"))
        encoded = encode_body(URL, prepare_payload(simple_email))
        assert encoded.content_type.startswith("multipart/form-data; boundary=")

    def test_single_attachment_forces_multipart(self):
        email = (
            Email()
            .put_from("a@x.com")
            .to("b@x.com")
            .put_text_body("plain only")
            .attachment(Attachment.from_data(b"x", "x.bin"))
        )
        encoded = encode_body(URL, prepare_payload(email))
        assert encoded.content_type.startswith("multipart/form-data")
        assert b'name="text"' in encoded.body
        assert b"plain only" in encoded.body

    def test_file_parts_in_order(self, simple_email):
        for name in ("one.txt", "two.txt", "three.txt"):
            simple_email.attachment(Attachment.from_data(name.encode(), name))
        body = encode_body(URL, prepare_payload(simple_email)).body

        assert body.count(b"filename=") == 3
        positions = [body.index(f'filename="{n}"'.encode()) for n in ("one.txt", "two.txt", "three.txt")]
        assert positions == sorted(positions)

    def test_text_fields_before_files(self, simple_email):
        simple_email.attachment(Attachment.from_data(b"data", "a.txt"))
        body = encode_body(URL, prepare_payload(simple_email)).body
        assert body.index(b'name="subject"') < body.index(b'name="attachment"')

    def test_inline_and_regular_field_names(self, simple_email):
        simple_email.attachment(Attachment.from_data(b"img", "logo.png", type="inline"))
        simple_email.attachment(Attachment.from_data(b"doc", "doc.txt"))
        body = encode_body(URL, prepare_payload(simple_email)).body
        assert b'name="inline"; filename="logo.png"' in body
        assert b'name="attachment"; filename="doc.txt"' in body

    def test_part_content_type(self, simple_email):
        simple_email.attachment(Attachment.from_data(b"{}", "data.json", content_type="application/json"))
        body = encode_body(URL, prepare_payload(simple_email)).body
        assert b"Content-Type: application/json" in body

    def test_path_attachment_read_at_encode_time(self, simple_email, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_bytes(b"file on disk")
        simple_email.attachment(str(path))
        encoded = encode_body(URL, prepare_payload(simple_email))
        assert b"file on disk" in encoded.body
        assert b'filename="notes.txt"' in encoded.body

    def test_list_field_one_part_per_item(self, simple_email):
        simple_email.put_provider_option("tags", ["a", "b"])
        simple_email.attachment(Attachment.from_data(b"x", "a.txt"))
        body = encode_body(URL, prepare_payload(simple_email)).body
        assert body.count(b'name="o:tag"') == 2

    def test_content_length_matches_body(self, simple_email):
        simple_email.attachment(Attachment.from_data(b"x" * 1024, "a.bin"))
        encoded = encode_body(URL, prepare_payload(simple_email))
        assert encoded.content_length == len(encoded.body)
