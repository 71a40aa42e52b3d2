import json

import pytest

from chatgame.catalog import Catalog, load_catalog, load_catalog_or_empty
from chatgame.errors import CatalogLoadError, ProblemNotFound


def _write(tmp_path, content):
    path = tmp_path / "blocks.json"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_catalog_keeps_block_order_and_raw_data(tmp_path):
    raw = [
        {"name": "Practice", "problems": [{"q": 1}, {"q": 2}]},
        {"name": "Block A", "problems": [{"q": 3}]},
    ]
    catalog = load_catalog(_write(tmp_path, json.dumps(raw)))

    assert len(catalog) == 2
    assert catalog.to_json() == raw
    assert catalog.get(0, 1) == {"q": 2}
    assert len(catalog.block(1)) == 1


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(CatalogLoadError):
        load_catalog(tmp_path / "absent.json")


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"problems": []}),
        json.dumps([{"name": "no problems"}]),
        json.dumps([["not", "an", "object"]]),
    ],
)
def test_load_catalog_rejects_malformed_source(tmp_path, content):
    with pytest.raises(CatalogLoadError):
        load_catalog(_write(tmp_path, content))


def test_load_catalog_or_empty_falls_back(tmp_path, caplog):
    catalog = load_catalog_or_empty(tmp_path / "absent.json")

    assert len(catalog) == 0
    assert "chargement des blocs" in caplog.text


def test_bundled_blocks_file_loads():
    from chatgame.paths import BLOCKS_PATH

    catalog = load_catalog(BLOCKS_PATH)
    assert len(catalog) == 3


def test_get_out_of_range_raises(catalog):
    with pytest.raises(ProblemNotFound):
        catalog.get(99, 0)
    with pytest.raises(ProblemNotFound):
        catalog.get(0, 5)
    with pytest.raises(ProblemNotFound):
        catalog.get(None, None)
    with pytest.raises(ProblemNotFound):
        catalog.get(-1, 0)


def test_problem_update_substitutes_nulls(catalog):
    assert catalog.problem_update(99, 0) == {"block": None, "problem": None}
    assert catalog.problem_update(None, None) == {"block": None, "problem": None}

    update = catalog.problem_update(1, 7)
    assert update["block"]["name"] == "block 1"
    assert update["problem"] is None

    assert catalog.problem_update(2, 4)["problem"] == {"question": "q2-4"}


def test_empty_catalog():
    catalog = Catalog()
    assert catalog.block(0) is None
    assert catalog.problem_update(0, 0) == {"block": None, "problem": None}
