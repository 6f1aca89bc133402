import os
import random

from auction_server.catalog import Catalog, load_catalog
from auction_server.config import CATALOG_PATH
from support import make_lots

def test_load_catalog(tmp_path):
    path = tmp_path / "lots.csv"
    path.write_text("id,name,position,start_price\n1, Ahri ,mid,50\n2,Lulu,sup,\n", encoding="utf-8")
    catalog = load_catalog(str(path))
    lots = list(catalog.original)
    assert [(l.lot_id, l.name, l.category, l.starting_price) for l in lots] == [
        ("1", "Ahri", "mid", 50), ("2", "Lulu", "sup", 0)]
    assert catalog.categories == ["mid", "sup"]

def test_bundled_catalog():
    assert os.path.exists(CATALOG_PATH)
    catalog = load_catalog(CATALOG_PATH)
    assert len(catalog) == 12
    assert sorted(catalog.categories) == ["ad", "jungle", "mid", "sup"]

def test_working_copy_is_fresh_and_shuffled():
    lots = make_lots([(f"L{i}", "mid") for i in range(10)])
    catalog = Catalog(lots, rng=random.Random(3))
    first = catalog.working_copy()
    first[0].status = "ACQUIRED"
    second = catalog.working_copy()
    assert all(l.status == "UNSOLD" for l in second)
    assert all(l.status == "UNSOLD" for l in catalog.original)
    assert sorted(l.name for l in second) == sorted(l.name for l in lots)
    assert [l.name for l in catalog.original] == [f"L{i}" for i in range(10)]

def test_working_copy_without_shuffle_keeps_order():
    lots = make_lots([("A", "mid"), ("B", "top")])
    catalog = Catalog(lots, shuffle=False)
    assert [l.name for l in catalog.working_copy()] == ["A", "B"]
