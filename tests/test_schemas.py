from schemas.processes import StartClientRequest, StartSignalingRequest


def test_signaling_flags_keep_falsy_values():
    assert StartSignalingRequest(host="", port=0).to_args() == ["--host", "", "--port", "0"]


def test_signaling_flags_omitted_when_unset():
    assert StartSignalingRequest().to_args() == []


def test_client_flags():
    assert StartClientRequest(room="r1", caller=True).to_args() == [
        "-room", "r1", "-server", "localhost:8080", "-caller",
    ]
    assert StartClientRequest().to_args() == ["-room", "default-room", "-server", "localhost:8080"]
