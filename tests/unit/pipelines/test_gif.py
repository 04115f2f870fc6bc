"""Tests for animated GIF encoding."""

from pathlib import Path

import pytest

from morphit.backends.base import IOPaths
from morphit.backends.media import MediaBackend
from morphit.core.options import GIFOptions
from morphit.exceptions import InvocationFailedError, NoOutputError
from morphit.formats.media import MEDIA_FORMATS
from morphit.pipelines.gif import encode_gif, gif_filter, paletteuse_args, single_pass_args

GIF = MEDIA_FORMATS["gif"]


@pytest.fixture
def job_paths(runtime, temp_dir):
    source = temp_dir / "clip.mp4"
    source.write_bytes(b"mp4")
    return IOPaths.single(source, runtime.temp.create_temp_file_named("clip.gif"))


class TestArgs:
    """Tests for GIF argument builders."""

    def test_filter(self):
        """Frame rate, then a Lanczos scale keeping the aspect ratio."""
        assert gif_filter(GIFOptions(fps=12, width=320)) == "fps=12,scale=320:-1:flags=lanczos"

    def test_single_pass(self, tmp_path):
        """Without a palette the loop count goes straight to the encoder."""
        paths = IOPaths.single(tmp_path / "in.mp4", tmp_path / "out.gif")
        args = single_pass_args(GIFOptions(loop=-1), paths)
        assert args[args.index("-loop") + 1] == "-1"
        assert args[-1] == str(paths.output)

    def test_paletteuse(self, tmp_path):
        """Stage B takes the palette as a second input."""
        paths = IOPaths.single(tmp_path / "in.mp4", tmp_path / "out.gif")
        args = paletteuse_args(GIFOptions(), paths, tmp_path / "palette.png")
        assert args[2:4] == ["-i", str(tmp_path / "palette.png")]
        assert args[args.index("-lavfi") + 1].endswith("[x];[x][1:v]paletteuse")


class TestEncodeGif:
    """Tests for the GIF pipeline."""

    async def test_palette_is_removed(self, runtime, fake_runner, fake_tools, job_paths):
        """The palette exists for stage B and is gone afterwards."""
        await encode_gif(MediaBackend(runtime), GIF, GIFOptions(), job_paths)

        palette = Path(fake_runner.argvs[0][-1])
        assert palette.name == "palette.png"
        assert fake_runner.argvs[1][4] == str(palette)
        assert not palette.exists()
        assert not runtime.temp.is_tracked(palette)
        assert job_paths.output.exists()

    async def test_palette_removed_on_failure(self, runtime, fake_runner, fake_tools, job_paths):
        """Stage B failing still removes the palette."""
        fake_runner.push(0)
        fake_runner.push(1, stderr="Error initializing filter 'paletteuse'", write_output=False)

        with pytest.raises(InvocationFailedError):
            await encode_gif(MediaBackend(runtime), GIF, GIFOptions(), job_paths)

        assert not Path(fake_runner.argvs[0][-1]).exists()

    async def test_missing_palette(self, runtime, fake_runner, fake_tools, job_paths):
        """Stage B does not run when stage A wrote nothing."""
        fake_runner.push(0, write_output=False)

        with pytest.raises(NoOutputError):
            await encode_gif(MediaBackend(runtime), GIF, GIFOptions(), job_paths)
        assert len(fake_runner.calls) == 1

    async def test_single_pass(self, runtime, fake_runner, fake_tools, job_paths):
        """use_palette off encodes in one run."""
        await encode_gif(
            MediaBackend(runtime), GIF, GIFOptions(use_palette=False), job_paths
        )

        assert len(fake_runner.calls) == 1
        assert "palettegen" not in " ".join(fake_runner.argvs[0])
