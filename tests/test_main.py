import json
from pathlib import Path

import pytest

from geometry import Rect
from main import build_waves, water_coverage
from wave_animation import Continuous
from wave_surface import WaveParameters, generate_surface

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"


def test_background_layers_run_slower():
    waves = build_waves([
        {'animation': {'type': 'continuous', 'duration': 1.0}, 'background': True, 'slowdown': 0.5},
        {'animation': {'type': 'continuous', 'duration': 1.0}},
    ])
    assert [wave.behaviour for wave in waves] == [Continuous(1.5), Continuous(1.0)]


def test_shipped_config_builds():
    config = json.loads(CONFIG_PATH.read_text())
    waves = build_waves(config['waves'])
    assert len(waves) == len(config['viewer']['wave_colors'])


def test_water_coverage_of_the_front_layer():
    viewport = Rect.from_size(0.0, 0.0, 100.0, 100.0)
    back = generate_surface(viewport, WaveParameters(0.0, 0.25, water_level=0.9))
    front = generate_surface(viewport, WaveParameters(0.0, 0.25, water_level=0.25))
    assert water_coverage([back, front], viewport) == pytest.approx(0.25)
    assert water_coverage([], viewport) == 0.0
