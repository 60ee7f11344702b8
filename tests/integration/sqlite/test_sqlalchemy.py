"""
Integration tests for the helpers over a SQLAlchemy connection.
"""
from dataclasses import dataclass

import dbhelpers as db


@dataclass
class Row:
    name: str
    x: int


def test_read_through_sqlalchemy(sa_conn):
    values = db.read(sa_conn, 'SELECT x FROM t ORDER BY id', lambda r: r.get_int(0)).fetchall()
    assert values == [10, 20, 30]


def test_execute_through_sqlalchemy(sa_conn):
    assert db.execute(sa_conn, 'INSERT INTO t (name, x) VALUES (?, ?)', ['Diana', 40]) == 1
    assert db.select(sa_conn, Row, 'FROM t WHERE x = ?', [40]).fetchall() == [Row('Diana', 40)]


def test_sqlalchemy_transaction_handle(sa_conn):
    tx = sa_conn.begin()
    db.execute(sa_conn, 'DELETE FROM t', transaction=tx)
    tx.rollback()

    count = db.read(sa_conn, 'SELECT COUNT(*) FROM t', lambda r: r[0]).fetchall()
    assert count == [3]
