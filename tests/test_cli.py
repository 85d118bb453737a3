import logging

import ezdxf
import pytest
import yaml

from rebarcad.__main__ import main
from rebarcad.logging_config import configure, get_logger


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger("rebarcad")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def _write_job(tmp_path, operations=None):
    job = {
        "geometry": {
            "bottom": {"line": [[0, 0, 0], [1000, 0, 0]]},
            "top": {"line": [[0, 500, 0], [1000, 500, 0]]},
        },
        "operations": operations or [
            {"name": "MORPH", "op": "morph", "from": "bottom", "to": "top", "count": 2},
        ],
    }
    path = tmp_path / "job.yaml"
    path.write_text(yaml.safe_dump(job))
    return path


def test_run_writes_dxf(tmp_path, capsys):
    job = _write_job(tmp_path)
    out = tmp_path / "bars.dxf"
    assert main(["run", str(job), "--output", str(out)]) == 0
    assert "Wrote 2 curves" in capsys.readouterr().out
    doc = ezdxf.readfile(str(out))
    assert doc.layers.has_entry("MORPH")
    assert len(doc.modelspace().query("SPLINE")) == 2


def test_run_default_output(tmp_path):
    job = _write_job(tmp_path)
    assert main(["run", str(job)]) == 0
    assert (tmp_path / "job.dxf").exists()


def test_run_log_file(tmp_path):
    job = _write_job(tmp_path)
    log = tmp_path / "run.log"
    assert main(["run", str(job), "--debug", "--log-file", str(log)]) == 0
    assert "MORPH: 2 curves" in log.read_text()


def test_check(tmp_path, capsys):
    job = _write_job(tmp_path)
    assert main(["check", str(job)]) == 0
    out = capsys.readouterr().out
    assert "MORPH: 2 curves" in out
    assert "OK" in out


def test_missing_file(tmp_path, capsys):
    assert main(["run", str(tmp_path / "nope.yaml")]) == 1
    assert "File not found" in capsys.readouterr().err


def test_bad_job(tmp_path, capsys):
    job = _write_job(tmp_path, [{"op": "bend"}])
    assert main(["check", str(job)]) == 1
    assert "Error:" in capsys.readouterr().err


def test_unknown_bar_catalog(tmp_path, capsys):
    job = {
        "bar_catalog": "nosuch",
        "geometry": {"slab": {"plane": {"width": 1000, "height": 1000}}},
        "operations": [{"op": "follow", "face": "slab", "count": 2,
                        "cover": 30, "bar_type": "D12"}],
    }
    path = tmp_path / "job.yaml"
    path.write_text(yaml.safe_dump(job))
    assert main(["check", str(path)]) == 1
    assert "Error: No bar-type catalog found for 'nosuch'" in capsys.readouterr().err
    assert main(["run", str(path)]) == 1
    assert not (tmp_path / "job.dxf").exists()


def test_bad_coordinates(tmp_path, capsys):
    path = tmp_path / "job.yaml"
    path.write_text(yaml.safe_dump({
        "geometry": {"bottom": {"line": [[0, 0, 0], [10]]}},
        "operations": [],
    }))
    assert main(["check", str(path)]) == 1
    assert "Error:" in capsys.readouterr().err
    assert main(["run", str(path)]) == 1
    assert "Error:" in capsys.readouterr().err


def test_bartypes(capsys):
    assert main(["bartypes"]) == 0
    out = capsys.readouterr().out
    assert "D12" in out
    assert main(["bartypes", "--catalog", "imperial"]) == 0
    assert "#4" in capsys.readouterr().out


def test_bartypes_unknown_catalog(capsys):
    assert main(["bartypes", "--catalog", "nordic"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_configure_levels():
    logger = configure(debug=True)
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    logger = configure()
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert get_logger("rebarcad.test", logging.WARNING).level == logging.WARNING
