import os

import pytest

from transcribe import audio_processor
from transcribe.errors import ConversionError


def test_is_supported_audio_ignores_case():
    assert audio_processor.is_supported_audio("a.wav")
    assert audio_processor.is_supported_audio("dir/A.WAV")
    assert not audio_processor.is_supported_audio("a.mp3")
    assert not audio_processor.is_supported_audio("wav")


def test_new_temp_path_is_unique():
    first = audio_processor.new_temp_path("/x/talk.wav")
    second = audio_processor.new_temp_path("/y/talk.wav")
    try:
        assert first != second
        assert os.path.basename(first).startswith("talk-")
        assert first.endswith(".wav")
    finally:
        audio_processor.cleanup_temp_file(first)
        audio_processor.cleanup_temp_file(second)


def test_convert_to_mono_runs_sox_remix(fake_sox, make_wav, tmp_path):
    src = make_wav("stereo.wav")
    out = str(tmp_path / "mono.wav")
    audio_processor.convert_to_mono(src, out, sox_binary="/usr/bin/sox")
    assert fake_sox == [["/usr/bin/sox", src, out, "remix", "1-2"]]
    assert os.path.exists(out)


def test_convert_to_mono_failure_carries_output(fake_sox, make_wav, tmp_path):
    src = make_wav("bad.wav")
    with pytest.raises(ConversionError) as excinfo:
        audio_processor.convert_to_mono(src, str(tmp_path / "mono.wav"))
    assert "can't open input file" in excinfo.value.output
    assert "can't open input file" in str(excinfo.value)


def test_convert_to_mono_missing_binary(make_wav, tmp_path):
    src = make_wav("stereo.wav")
    with pytest.raises(ConversionError) as excinfo:
        audio_processor.convert_to_mono(
            src, str(tmp_path / "mono.wav"), sox_binary=str(tmp_path / "no-such-sox")
        )
    assert "installed" in excinfo.value.output


def test_cleanup_temp_file(tmp_path):
    path = tmp_path / "x.wav"
    path.write_bytes(b"")
    audio_processor.cleanup_temp_file(str(path))
    assert not path.exists()
    audio_processor.cleanup_temp_file(str(path))
    audio_processor.cleanup_temp_file(None)
