import sqlite3

import dbhelpers as db
import pytest


def test_wrapper_methods(sqlite_conn):
    cn = db.ConnectionWrapper(sqlite_conn)

    assert cn.execute('INSERT INTO t (name, x) VALUES (?, ?)', ['Diana', 40]) == 1
    assert cn.read('SELECT x FROM t ORDER BY x', lambda r: r[0]).fetchall() == [10, 20, 30, 40]

    seen = []
    cn.for_each('SELECT name FROM t', lambda r: seen.append(r[0]))
    assert len(seen) == 4

    assert cn.calls == 3
    assert cn.time >= 0


def test_wrapper_batch_and_predicate(sqlite_conn):
    cn = db.ConnectionWrapper(sqlite_conn)

    def bind(value, slots):
        slots[0].value = value

    assert cn.execute_batch('UPDATE t SET x = x * 2 WHERE name = ?', 1, bind, ['Alice', 'Bob']) == 2

    seen = []
    cn.for_each_while('SELECT x FROM t ORDER BY x', lambda r: seen.append(r[0]) or r[0] < 40)
    assert seen == [20, 30, 40]
    assert cn.calls == 3


def test_wrapper_delegates_and_closes():
    conn = sqlite3.connect(':memory:')
    with db.ConnectionWrapper(conn) as cn:
        assert cn.total_changes == 0
        assert cn.dialect == 'sqlite'
    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute('SELECT 1')
