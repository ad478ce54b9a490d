from program_store import ProgramStore


def make_store():
    store = ProgramStore()
    store.insert_or_replace(30, "PRINT 3")
    store.insert_or_replace(10, "PRINT 1")
    store.insert_or_replace(20, "PRINT 2")
    return store


def test_ascending_order():
    assert list(make_store()) == [(10, "PRINT 1"), (20, "PRINT 2"), (30, "PRINT 3")]


def test_replace_keeps_single_entry():
    store = make_store()
    store.insert_or_replace(20, "END")
    assert store.find(20) == "END"
    assert len(store) == 3


def test_delete_and_missing_delete():
    store = make_store()
    store.delete(20)
    store.delete(25)
    assert 20 not in store
    assert [n for n, _ in store] == [10, 30]


def test_find_next_after():
    store = make_store()
    assert store.find_next_after(10) == (20, "PRINT 2")
    assert store.find_next_after(15) == (20, "PRINT 2")
    assert store.find_next_after(0) == (10, "PRINT 1")
    assert store.find_next_after(30) is None


def test_first_and_clear():
    store = make_store()
    assert store.first() == (10, "PRINT 1")
    store.clear()
    assert store.first() is None
    assert len(store) == 0


def test_listing_ranges():
    store = make_store()
    assert store.listing() == ["10 PRINT 1\n", "20 PRINT 2\n", "30 PRINT 3\n"]
    assert store.listing(20, 20) == ["20 PRINT 2\n"]
    assert store.listing(15, None) == ["20 PRINT 2\n", "30 PRINT 3\n"]
    assert store.listing(None, 15) == ["10 PRINT 1\n"]
