import base64
import io

import pytest

from services.errors import ReadError
from services.image_codec import ImageCodec, encode_base64, split_data_url, to_data_url


class BrokenFile(io.BytesIO):
    def read(self, *args, **kwargs):
        raise OSError("disk went away")


@pytest.mark.asyncio
async def test_transfer_payload_is_base64_of_file_bytes(make_png, make_upload):
    data = make_png()
    payload = await ImageCodec().to_transfer_payload(make_upload(data))
    assert payload == base64.b64encode(data).decode("ascii")
    assert base64.b64decode(payload) == data


@pytest.mark.asyncio
async def test_display_payload_shares_bytes_with_transfer_payload(make_png, make_upload):
    codec = ImageCodec()
    upload = make_upload(make_png(), content_type="image/png")
    transfer = await codec.to_transfer_payload(upload)
    display = await codec.to_display_payload(upload)
    assert display == f"data:image/png;base64,{transfer}"
    assert split_data_url(display) == transfer


@pytest.mark.asyncio
async def test_each_read_starts_from_the_beginning(make_png, make_upload):
    codec = ImageCodec()
    upload = make_upload(make_png())
    first = await codec.read_bytes(upload)
    second = await codec.read_bytes(upload)
    assert first == second != b""


@pytest.mark.asyncio
async def test_empty_file_is_a_read_error(make_upload):
    with pytest.raises(ReadError):
        await ImageCodec().to_transfer_payload(make_upload(b""))


@pytest.mark.asyncio
async def test_undecodable_bytes_are_a_read_error_when_checking(make_upload):
    with pytest.raises(ReadError):
        await ImageCodec(check_decodable=True).to_transfer_payload(make_upload(b"definitely not an image"))


@pytest.mark.asyncio
async def test_bytes_pass_through_undecoded_by_default(make_upload):
    svg = b'<svg xmlns="http://www.w3.org/2000/svg" width="4" height="4"/>'
    upload = make_upload(svg, content_type="image/svg+xml", filename="logo.svg")

    codec = ImageCodec()
    payload = await codec.to_transfer_payload(upload)

    assert payload == encode_base64(svg)
    assert await codec.to_display_payload(upload) == f"data:image/svg+xml;base64,{payload}"


@pytest.mark.asyncio
async def test_failed_read_is_a_read_error(make_upload):
    upload = make_upload(b"ignored")
    upload.file = BrokenFile(b"ignored")
    with pytest.raises(ReadError):
        await ImageCodec().read_bytes(upload)


def test_data_url_helpers():
    assert encode_base64(b"ABC") == "QUJD"
    assert to_data_url("QUJD", "image/jpeg") == "data:image/jpeg;base64,QUJD"
    assert split_data_url("data:image/png;base64,QUJD") == "QUJD"
    with pytest.raises(ValueError):
        split_data_url("QUJD")
