import asyncio
import shutil
import wave
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from transcribot.errors import TranscodeError
from transcribot.media.audio import AudioAsset
from transcribot.media.transcoder import Transcoder

needs_ffmpeg = pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not installed")


def make_asset(path) -> AudioAsset:
    return AudioAsset(path=path, content_id=path.stem, size=path.stat().st_size)


def fake_process(returncode: int, stderr: bytes = b"") -> MagicMock:
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(None, stderr))
    return process


def test_command_forces_mono_16k_pcm(tmp_path):
    cmd = Transcoder("/usr/bin/ffmpeg").build_command(tmp_path / "in.ogg", tmp_path / "out.wav")

    assert cmd[0] == "/usr/bin/ffmpeg"
    assert cmd[cmd.index("-ar") + 1] == "16000"
    assert cmd[cmd.index("-ac") + 1] == "1"
    assert cmd[cmd.index("-acodec") + 1] == "pcm_s16le"
    assert cmd[cmd.index("-i") + 1] == str(tmp_path / "in.ogg")
    assert cmd[-1] == str(tmp_path / "out.wav")


async def test_nonzero_exit_raises(tmp_path):
    source = tmp_path / "in.ogg"
    source.write_bytes(b"OggS")
    process = fake_process(1, b"Invalid data found when processing input")

    with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=process)):
        with pytest.raises(TranscodeError, match="Invalid data"):
            await Transcoder().transcode(make_asset(source))


async def test_missing_output_raises(tmp_path):
    source = tmp_path / "in.ogg"
    source.write_bytes(b"OggS")

    with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=fake_process(0))):
        with pytest.raises(TranscodeError, match="no output"):
            await Transcoder().transcode(make_asset(source))


async def test_missing_binary_raises(tmp_path):
    source = tmp_path / "in.ogg"
    source.write_bytes(b"OggS")

    with patch(
        "asyncio.create_subprocess_exec",
        new=AsyncMock(side_effect=FileNotFoundError("ffmpeg")),
    ):
        with pytest.raises(TranscodeError, match="could not start"):
            await Transcoder().transcode(make_asset(source))


async def test_output_in_wrong_format_raises(tmp_path, make_wav):
    source = tmp_path / "in.ogg"
    source.write_bytes(b"OggS")

    async def fake_ffmpeg(*args, **kwargs):
        make_wav(Path(args[-1]), rate=44100, channels=2)
        return fake_process(0)

    with patch("asyncio.create_subprocess_exec", new=fake_ffmpeg):
        with pytest.raises(TranscodeError, match="44100 Hz"):
            await Transcoder().transcode(make_asset(source))


async def test_returns_waveform_from_output(tmp_path, make_wav):
    source = tmp_path / "in.ogg"
    source.write_bytes(b"OggS")

    async def fake_ffmpeg(*args, **kwargs):
        make_wav(Path(args[-1]), seconds=1.0)
        return fake_process(0)

    with patch("asyncio.create_subprocess_exec", new=fake_ffmpeg):
        waveform = await Transcoder().transcode(make_asset(source))

    assert waveform.is_canonical
    assert waveform.path.name == "in.pcm16k.wav"
    assert waveform.duration == pytest.approx(1.0)


@needs_ffmpeg
async def test_canonical_input_stays_canonical(tmp_path, canonical_wav):
    """Feeding a canonical waveform back through ffmpeg yields the same format."""
    out_dir = tmp_path / "out"
    out_dir.mkdir()

    waveform = await Transcoder().transcode(make_asset(canonical_wav), out_dir)

    assert waveform.is_canonical
    with wave.open(str(canonical_wav), "rb") as original:
        assert waveform.frames == original.getnframes()
    assert waveform.path != canonical_wav


@needs_ffmpeg
async def test_stereo_44k_is_downmixed_and_resampled(tmp_path, make_wav):
    source = make_wav(tmp_path / "stereo.wav", seconds=1.0, rate=44100, channels=2)

    waveform = await Transcoder().transcode(make_asset(source))

    assert (waveform.sample_rate, waveform.channels, waveform.sample_width) == (16000, 1, 2)
    assert waveform.duration == pytest.approx(1.0, abs=0.05)


async def test_ffmpeg_does_not_read_bot_stdin(tmp_path):
    source = tmp_path / "in.ogg"
    source.write_bytes(b"OggS")
    exec_mock = AsyncMock(return_value=fake_process(1, b"bad"))

    with patch("asyncio.create_subprocess_exec", new=exec_mock):
        with pytest.raises(TranscodeError):
            await Transcoder().transcode(make_asset(source))

    assert exec_mock.call_args.kwargs["stdin"] == asyncio.subprocess.DEVNULL


@pytest.mark.skipif(shutil.which("sleep") is None, reason="no sleep binary")
async def test_cancelled_transcode_kills_ffmpeg(tmp_path, sleeping_binary):
    source = tmp_path / "in.ogg"
    source.write_bytes(b"OggS")
    spawned = []
    real_exec = asyncio.create_subprocess_exec

    async def spy_exec(*args, **kwargs):
        process = await real_exec(*args, **kwargs)
        spawned.append(process)
        return process

    with patch("asyncio.create_subprocess_exec", new=spy_exec):
        task = asyncio.create_task(Transcoder(str(sleeping_binary)).transcode(make_asset(source)))
        while not spawned:
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    assert spawned[0].returncode is not None
