"""Tests for the command-line interface."""

import numpy as np
from PIL import Image

from terrainsynth.cli import build_parser, main
from terrainsynth.persistence import load_terrain


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self) -> None:
        """Unset options stay None so settings keep their values."""
        args = build_parser().parse_args([])
        assert args.resolution is None
        assert args.scale is None
        assert args.sculpt == []
        assert not args.verbose

    def test_repeatable_sculpt(self) -> None:
        """--sculpt collects one XYZ triple per use."""
        args = build_parser().parse_args(["--sculpt", "1", "2", "3", "--sculpt", "0", "0", "0"])
        assert args.sculpt == [[1.0, 2.0, 3.0], [0.0, 0.0, 0.0]]


class TestMain:
    """Tests for the CLI entry point."""

    def test_generate_and_save(self, tmp_path, capsys) -> None:
        """Generates, saves the terrain and the minimap."""
        output = tmp_path / "terrain.npz"
        minimap = tmp_path / "minimap.png"

        code = main(
            [
                "--seed", "5",
                "--resolution", "10",
                "--minimap-size", "16",
                "--output", str(output),
                "--minimap", str(minimap),
            ]
        )

        assert code == 0
        assert "121 vertices" in capsys.readouterr().out

        loaded = load_terrain(output)
        assert loaded.grid.resolution == 10
        assert loaded.settings.seed == 5
        with Image.open(minimap) as image:
            assert image.size == (16, 16)

    def test_octave_flags(self, tmp_path) -> None:
        """Octave flags end up in the saved settings."""
        output = tmp_path / "terrain.npz"
        code = main(
            [
                "--resolution", "4",
                "--scale", "35",
                "--height", "12",
                "--octaves", "2",
                "--persistence", "0.3",
                "--lacunarity", "3",
                "--water-level", "1.5",
                "--output", str(output),
            ]
        )
        assert code == 0

        octave = load_terrain(output).settings.octave
        assert octave.scale == 35.0
        assert octave.height_scale == 12.0
        assert octave.octaves == 2
        assert octave.persistence == 0.3
        assert octave.lacunarity == 3.0

    def test_sculpt_strokes(self, tmp_path) -> None:
        """Sculpt strokes raise the saved elevation."""
        flat = tmp_path / "flat.npz"
        sculpted = tmp_path / "sculpted.npz"
        base = ["--seed", "1", "--resolution", "20", "--octaves", "0"]

        assert main(base + ["--output", str(flat)]) == 0
        assert main(base + ["--sculpt", "0", "0", "0", "--output", str(sculpted)]) == 0

        assert np.all(load_terrain(flat).grid.positions[:, 2] == 0.0)
        assert load_terrain(sculpted).grid.positions[:, 2].max() == 2.0

    def test_config_file(self, tmp_path) -> None:
        """Settings come from TOML, with flags taking precedence."""
        config = tmp_path / "terrain.toml"
        config.write_text("seed = 3\nresolution = 6\n\n[octave]\nscale = 50\n")
        output = tmp_path / "terrain.npz"

        code = main(["--config", str(config), "--resolution", "5", "--output", str(output)])

        assert code == 0
        settings = load_terrain(output).settings
        assert settings.seed == 3
        assert settings.resolution == 5
        assert settings.octave.scale == 50.0

    def test_load_round_trip(self, tmp_path) -> None:
        """--load resumes a saved terrain and can sculpt it further."""
        first = tmp_path / "first.npz"
        second = tmp_path / "second.npz"
        base = ["--seed", "9", "--resolution", "8", "--octaves", "0"]
        assert main(base + ["--sculpt", "0", "0", "0", "--output", str(first)]) == 0

        code = main(["--load", str(first), "--sculpt", "0", "0", "2", "--output", str(second)])

        assert code == 0
        before = load_terrain(first).grid.positions
        after = load_terrain(second).grid.positions
        center = 4 * 9 + 4
        assert before[center, 2] == 2.0
        assert after[center, 2] == 4.0
        np.testing.assert_array_equal(np.delete(after, center, axis=0), np.delete(before, center, axis=0))

    def test_missing_config(self, tmp_path) -> None:
        """A missing config file exits with status 1."""
        assert main(["--config", str(tmp_path / "nope.toml")]) == 1

    def test_invalid_config(self, tmp_path) -> None:
        """Malformed TOML exits with status 1."""
        config = tmp_path / "bad.toml"
        config.write_text("resolution = = 1")
        assert main(["--config", str(config)]) == 1

    def test_missing_load_file(self, tmp_path) -> None:
        """A missing terrain file exits with status 1."""
        assert main(["--load", str(tmp_path / "nope.npz")]) == 1

    def test_corrupt_load_file(self, tmp_path) -> None:
        """A file that isn't a terrain archive exits with status 1."""
        path = tmp_path / "bad.npz"
        path.write_bytes(b"not a zip file")
        assert main(["--load", str(path)]) == 1
