from gpass.models.message import Message


def test_plaintext_message() -> None:
    message = Message.plaintext(bytearray(b"hunter2"))

    assert not message.encrypted
    assert message.data == b"hunter2"
    assert isinstance(message.data, bytes)
    assert len(message) == 7


def test_armored_message_accepts_text() -> None:
    message = Message.armored("-----BEGIN PGP MESSAGE-----")

    assert message.encrypted
    assert message.data == b"-----BEGIN PGP MESSAGE-----"


def test_repr_hides_payload() -> None:
    assert "hunter2" not in repr(Message.plaintext(b"hunter2"))
