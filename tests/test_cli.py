"""Tests for the command-line front end."""

import argparse
from unittest import mock

import numpy as np
import pytest

from mirrorcast.vec3 import Vec3, Point3, Color
from mirrorcast.renderer import Renderer, RenderSettings
from mirrorcast.cli import (
    dequote, parse_vec3, parse_color01, parse_intensity, parse_resolution,
    parse_int, parse_positive_int, parse_sphere, parse_plane, parse_cube, parse_cylinder,
    build_parser, overrides_from_args, settings_from_args, main
)


class TestValueParsers:
    """Test the argument value parsers."""

    @pytest.mark.parametrize("text, expected", [
        ('"abc"', 'abc'),
        ("'abc'", 'abc'),
        ('"abc', '"abc'),
        ('"', '"'),
        ('abc', 'abc'),
    ])
    def test_dequote(self, text, expected):
        assert dequote(text) == expected

    def test_vec3(self):
        assert parse_vec3("1, 2.5,-3") == Vec3(1, 2.5, -3)
        assert parse_vec3('"0,1,0"') == Vec3(0, 1, 0)

    @pytest.mark.parametrize("text", ["1,2", "1,2,3,4", "a,b,c", ""])
    def test_vec3_malformed(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_vec3(text)

    def test_color_is_clamped(self):
        assert parse_color01("1.5,-0.2,0.4") == Color(1, 0, 0.4)

    def test_intensity_only_clamps_negatives(self):
        assert parse_intensity("2,-1,0.5") == Color(2, 0, 0.5)

    def test_resolution(self):
        assert parse_resolution("800x600") == (800, 600)
        assert parse_resolution("640X480") == (640, 480)

    def test_resolution_clamped_to_one(self):
        assert parse_resolution("0x-5") == (1, 1)

    @pytest.mark.parametrize("text", ["800", "800x", "axb", "1x2x3"])
    def test_resolution_malformed(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_resolution(text)

    def test_positive_int(self):
        assert parse_positive_int("8") == 8
        assert parse_positive_int("0") == 1
        with pytest.raises(argparse.ArgumentTypeError):
            parse_positive_int("many")

    def test_int_accepts_quotes_and_zero(self):
        assert parse_int('"0"') == 0
        assert parse_int(" -3 ") == -3
        with pytest.raises(argparse.ArgumentTypeError):
            parse_int("1.5")


class TestObjectParsers:
    """Test the custom object descriptions."""

    def test_sphere(self):
        center, radius, albedo, refl = parse_sphere("0,0,-1;0.5;0.9,0.2,0.2;0.3")
        assert center == Point3(0, 0, -1)
        assert radius == 0.5
        assert albedo == Color(0.9, 0.2, 0.2)
        assert refl == 0.3

    def test_quoted_fields(self):
        center, radius, _, _ = parse_sphere('0,0,-1;"0.5";"1,1,1";0')
        assert center == Point3(0, 0, -1)
        assert radius == 0.5

    def test_reflectivity_clamped(self):
        _, _, _, refl = parse_sphere("0,0,-1;0.5;1,1,1;4")
        assert refl == 1.0
        _, _, _, refl = parse_cube("0,0,-1;0.5;1,1,1;-2")
        assert refl == 0.0

    def test_plane(self):
        point, normal, albedo, refl = parse_plane("0,-0.5,0;0,1,0;0.8,0.8,0.8;0.1")
        assert point == Point3(0, -0.5, 0)
        assert normal == Vec3(0, 1, 0)

    def test_cube(self):
        center, size, _, _ = parse_cube("0.3,-0.2,-1.4;0.6;0.35,0.42,0.65;0")
        assert center == Point3(0.3, -0.2, -1.4)
        assert size == 0.6

    def test_cylinder(self):
        center, radius, half_height, albedo, refl = parse_cylinder(
            "1.4,-0.1,-1.6;0.3;0.4;0.2,0.7,0.4;0.05"
        )
        assert radius == 0.3
        assert half_height == 0.4
        assert refl == 0.05

    @pytest.mark.parametrize("parse, text", [
        (parse_sphere, "0,0,-1;0.5;1,1,1"),
        (parse_sphere, "0,0;0.5;1,1,1;0"),
        (parse_plane, "0,0,0;0,1,0;1,1,1;0;9"),
        (parse_cube, "0,0,0;big;1,1,1;0"),
        (parse_cylinder, "0,0,0;0.3;1,1,1;0"),
    ])
    def test_malformed(self, parse, text):
        with pytest.raises(argparse.ArgumentTypeError):
            parse(text)


class TestArgumentParser:
    """Test flag handling."""

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.scene == 'all'
        assert args.res is None
        assert args.add_sphere == []
        settings = settings_from_args(args)
        assert (settings.width, settings.height) == (400, 300)
        assert settings.samples_per_pixel == 16

    def test_repeatable_objects(self):
        args = build_parser().parse_args([
            '--add-sphere', '0,0,-1;0.5;1,0,0;0',
            '--add-sphere', '1,0,-1;0.25;0,1,0;0.5',
            '--add-cylinder', '0,0,-2;0.3;0.4;0,0,1;0',
        ])
        overrides = overrides_from_args(args)
        assert len(overrides.spheres) == 2
        assert len(overrides.cylinders) == 1
        assert overrides.has_objects()

    def test_camera_and_light_flags(self):
        args = build_parser().parse_args([
            '--lookfrom', '0,1,2', '--lookat', '0,0,0', '--fov', '45',
            '--light-pos', '1,2,3', '--light-int', '0.5,0.5,0.5'
        ])
        overrides = overrides_from_args(args)
        assert overrides.look_from == Point3(0, 1, 2)
        assert overrides.fov == 45.0
        assert overrides.light_intensity == Color(0.5, 0.5, 0.5)
        assert not overrides.has_objects()

    def test_settings_override_base(self):
        args = build_parser().parse_args(['--res', '32x16', '--spp', '2', '--seed', '9'])
        base = RenderSettings(width=100, height=100, samples_per_pixel=8, max_depth=3, gamma=1.8)
        settings = settings_from_args(args, base)
        assert (settings.width, settings.height) == (32, 16)
        assert settings.samples_per_pixel == 2
        assert settings.seed == 9
        assert settings.max_depth == 3
        assert settings.gamma == 1.8

    def test_quoted_integer_flags(self):
        args = build_parser().parse_args(['--depth', '"3"', '--threads', "'0'", '--seed', '"42"'])
        assert (args.depth, args.threads, args.seed) == (3, 0, 42)

    def test_malformed_value_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(['--res', 'big'])
        assert exc.value.code == 2


class TestMain:
    """End-to-end runs on tiny images."""

    def test_render_preset(self, tmp_path, capsys):
        out = tmp_path / "out.ppm"
        code = main([
            '--scene', 'sphere', '--res', '4x3', '--spp', '1',
            '--threads', '1', '--seed', '1', '--out', str(out)
        ])

        assert code == 0
        lines = out.read_text(encoding='ascii').splitlines()
        assert lines[:3] == ["P3", "4 3", "255"]
        assert len(lines) == 3 + 12
        assert "Scene: sphere" in capsys.readouterr().out

    def test_custom_objects_switch_scene(self, tmp_path, capsys):
        out = tmp_path / "custom.ppm"
        code = main([
            '--scene', 'sphere', '--res', '3x2', '--spp', '1', '--threads', '1',
            '--add-cube', '0,0,-1;0.5;0.2,0.4,0.6;0', '--out', str(out)
        ])
        assert code == 0
        assert "Scene: custom" in capsys.readouterr().out

    def test_default_output_name(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        assert main(['--scene', 'bogus', '--res', '2x2', '--spp', '1', '--threads', '1']) == 0
        assert (tmp_path / "scene_all.ppm").exists()

    def test_png_output(self, tmp_path, capsys):
        from PIL import Image

        out = tmp_path / "nested" / "out.png"
        assert main(['--res', '5x4', '--spp', '1', '--threads', '1', '--out', str(out)]) == 0
        with Image.open(out) as img:
            assert img.size == (5, 4)

    def test_scene_file(self, tmp_path, capsys):
        scene_file = tmp_path / "room.yaml"
        scene_file.write_text(
            "render: {width: 3, height: 2, samples: 1, threads: 1}\n"
            "objects:\n"
            "  - {type: sphere, center: [0, 0, -1], radius: 0.5}\n"
        )
        out_path = tmp_path / "room.ppm"
        assert main(['--scene-file', str(scene_file), '--out', str(out_path)]) == 0
        lines = out_path.read_text(encoding='ascii').splitlines()
        assert lines[1] == "3 2"
        assert "Scene: room" in capsys.readouterr().out

    def test_bad_scene_file(self, tmp_path, capsys):
        code = main(['--scene-file', str(tmp_path / "missing.yaml"), '--out', str(tmp_path / "x.ppm")])
        assert code == 1
        assert "error:" in capsys.readouterr().err

    def test_unwritable_output(self, tmp_path, capsys):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        code = main(['--res', '2x2', '--spp', '1', '--threads', '1', '--out', str(blocker / "out.ppm")])
        assert code == 1
        assert "cannot write" in capsys.readouterr().err

    def test_res_flag_reshapes_scene_file_camera(self, tmp_path, capsys):
        scene_file = tmp_path / "room.yaml"
        scene_file.write_text("render: {width: 40, height: 30, samples: 1, threads: 1}\n")
        out_path = tmp_path / "room.ppm"

        with mock.patch.object(Renderer, 'render', autospec=True,
                               return_value=np.zeros((20, 80, 3))) as render:
            code = main(['--scene-file', str(scene_file), '--res', '80x20', '--out', str(out_path)])

        assert code == 0
        _, _, camera, _ = render.call_args[0]
        assert camera.aspect_ratio == 4.0
        assert out_path.read_text(encoding='ascii').splitlines()[1] == "80 20"

    def test_scene_file_camera_keeps_file_aspect_without_res(self, tmp_path, capsys):
        scene_file = tmp_path / "room.yaml"
        scene_file.write_text("render: {width: 40, height: 30, samples: 1, threads: 1}\n")

        with mock.patch.object(Renderer, 'render', autospec=True,
                               return_value=np.zeros((30, 40, 3))) as render:
            assert main(['--scene-file', str(scene_file), '--out', str(tmp_path / "a.ppm")]) == 0

        _, _, camera, _ = render.call_args[0]
        assert abs(camera.aspect_ratio - 4 / 3) < 1e-12
