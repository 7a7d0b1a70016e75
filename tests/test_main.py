"""Command line rendering tests."""

import json
import logging
import sys

import numpy as np
import pytest
from skimage import io

import main
from utils.logger import LOGGER_NAME


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, 'excepthook', sys.excepthook)
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"logging": {"log_to_file": False}}))

    source = tmp_path / "photo.png"
    data = np.zeros((6, 10, 3), dtype=np.uint8)
    data[:, :5] = (200, 40, 40)
    data[:, 5:] = (30, 90, 160)
    io.imsave(source, data, check_contrast=False)

    yield tmp_path, source, config_path

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_parse_arguments_defaults():
    args = main.parse_arguments(["in.png"])

    assert args.input == "in.png"
    assert args.filter == "none"
    assert args.output is None
    assert all(getattr(args, field) is None for field in main.ADJUSTMENT_FIELDS)


def test_render_writes_output_and_comparison(cli_env):
    tmp_path, source, config_path = cli_env
    output = tmp_path / "out.png"
    comparison = tmp_path / "compare.png"

    code = main.main([
        str(source), "-o", str(output), "-f", "vintage",
        "--contrast", "20", "--blur", "1",
        "--compare", str(comparison), "-c", str(config_path),
    ])

    assert code == 0
    rendered = io.imread(output)
    assert rendered.shape == (6, 10, 4)
    assert io.imread(comparison).shape == (6, 10 + 8 + 10, 4)


def test_render_without_filter_reproduces_source(cli_env):
    tmp_path, source, config_path = cli_env
    output = tmp_path / "same.png"

    assert main.main([str(source), "-o", str(output), "-c", str(config_path)]) == 0
    np.testing.assert_array_equal(io.imread(output)[..., :3], io.imread(source))


def test_unknown_filter_fails(cli_env):
    tmp_path, source, config_path = cli_env
    output = tmp_path / "out.png"

    code = main.main([str(source), "-o", str(output), "-f", "psychedelic", "-c", str(config_path)])

    assert code == 1
    assert not output.exists()


def test_missing_input_fails(cli_env):
    tmp_path, _, config_path = cli_env
    code = main.main([str(tmp_path / "nope.png"), "-o", str(tmp_path / "out.png"), "-c", str(config_path)])
    assert code == 1


def test_output_requires_input(cli_env):
    tmp_path, _, config_path = cli_env
    assert main.main(["-o", str(tmp_path / "out.png"), "-c", str(config_path)]) == 2
