"""
Unit tests for command preparation and the row reader.
"""
import sqlite3
from contextlib import contextmanager

import pytest
from dbhelpers.command import Command, Parameter, prepare_command
from dbhelpers.options import CommandOptions, CommandType
from dbhelpers.reader import Reader

from tests.fixtures.mocks import FakeTransaction


def test_prepare_binds_one_slot_per_value(fake_connection):
    cn = fake_connection()
    cmd = prepare_command(cn, 'INSERT INTO t VALUES (?, ?)', [1, 'a'])

    assert cmd.text == 'INSERT INTO t VALUES (?, ?)'
    assert [p.value for p in cmd.parameters] == [1, 'a']
    assert cmd.values() == (1, 'a')
    cmd.close()


def test_prepare_leaves_driver_defaults(fake_connection):
    cn = fake_connection()
    with prepare_command(cn, 'SELECT 1') as cmd:
        assert cmd.transaction is None
        assert cmd.timeout is None
        assert cmd.command_type is None
        assert cmd.parameters == []


def test_prepare_applies_options(fake_connection):
    cn = fake_connection()
    tx = FakeTransaction(cn)
    options = CommandOptions(transaction=tx, timeout=30,
                             command_type=CommandType.STORED_PROCEDURE)
    with prepare_command(cn, 'refresh', None, options) as cmd:
        assert cmd.transaction is tx
        assert cmd.timeout == 30
        assert cmd.command_type is CommandType.STORED_PROCEDURE


def test_create_parameter_is_unbound(fake_connection):
    with Command(fake_connection(), 'SELECT ?') as cmd:
        param = cmd.create_parameter()
        assert isinstance(param, Parameter)
        assert param.value is None
        assert cmd.parameters == []


def test_slot_identity_survives_rebinding(fake_connection):
    cn = fake_connection()
    with Command(cn, 'INSERT INTO t VALUES (?)') as cmd:
        slot = cmd.add_parameter(1)
        cmd.execute_non_query()
        slot.value = 2
        cmd.execute_non_query()
        assert cmd.parameters[0] is slot
    assert [p for _, p in cn.executed] == [(1,), (2,)]
    assert len(cn.cursors) == 1


def test_close_is_idempotent(fake_connection):
    cn = fake_connection()
    cmd = Command(cn, 'SELECT 1')
    cmd.close()
    cmd.close()
    assert cn.cursors[0].close_calls == 1


def test_execute_reader_returns_reader(fake_connection):
    cn = fake_connection(rows=[(1, 'a')], columns=('id', 'name'))
    with Command(cn, 'SELECT id, name FROM t') as cmd, cmd.execute_reader() as reader:
        assert isinstance(reader, Reader)
        assert reader.read()
        assert reader.values() == (1, 'a')
        assert not reader.read()


class RecordingStrategy:

    def __init__(self):
        self.events = []

    @contextmanager
    def command_timeout(self, raw_conn, timeout):
        self.events.append(('enter', timeout))
        try:
            yield
        finally:
            self.events.append(('exit', timeout))


def test_reader_timeout_held_until_close(fake_connection):
    cn = fake_connection(rows=[(1,), (2,)])
    cmd = Command(cn, 'SELECT x FROM t', timeout=5)
    cmd.strategy = RecordingStrategy()

    reader = cmd.execute_reader()
    assert reader.read()
    assert cmd.strategy.events == [('enter', 5)]

    cmd.close()
    assert cmd.strategy.events == [('enter', 5), ('exit', 5)]
    cmd.close()
    assert len(cmd.strategy.events) == 2


def test_non_query_timeout_released_after_execute(fake_connection):
    cn = fake_connection()
    with Command(cn, 'DELETE FROM t', timeout=5) as cmd:
        cmd.strategy = RecordingStrategy()
        cmd.execute_non_query()
        assert cmd.strategy.events == [('enter', 5), ('exit', 5)]


def test_timeout_released_when_execute_fails(fake_connection):
    cn = fake_connection(error=sqlite3.OperationalError('boom'))
    with Command(cn, 'SELECT x FROM t', timeout=5) as cmd:
        cmd.strategy = RecordingStrategy()
        with pytest.raises(sqlite3.OperationalError):
            cmd.execute_reader()
        assert cmd.strategy.events == [('enter', 5), ('exit', 5)]


class TestReader:

    @pytest.fixture
    def reader(self, fake_connection):
        cn = fake_connection(rows=[(1, 'Alice', None), (2, 'Bob', 3.5)],
                             columns=('id', 'Name', 'score'))
        cursor = cn.cursor()
        cursor.execute('SELECT id, Name, score FROM t')
        return Reader(cursor, arraysize=1)

    def test_read_advances_in_order(self, reader):
        ids = []
        while reader.read():
            ids.append(reader[0])
        assert ids == [1, 2]
        assert reader.rows_read == 2

    def test_access_by_name_is_case_insensitive(self, reader):
        reader.read()
        assert reader['name'] == 'Alice'
        assert reader.get_ordinal('NAME') == 1
        assert reader.get_name(1) == 'Name'

    def test_typed_accessors(self, reader):
        reader.read()
        reader.read()
        assert reader.get_int('id') == 2
        assert reader.get_float('score') == 3.5
        assert reader.get_str(0) == '2'
        assert reader.get_bool(0) is True
        assert not reader.is_null('score')

    def test_null_detection(self, reader):
        reader.read()
        assert reader.is_null(2)

    def test_row_as_mapping(self, reader):
        reader.read()
        assert reader.to_dict() == {'id': 1, 'Name': 'Alice', 'score': None}
        assert reader.to_attrdict().Name == 'Alice'

    def test_field_metadata(self, reader):
        assert reader.field_count == 3
        assert len(reader) == 3

    def test_access_before_read(self, reader):
        with pytest.raises(ValueError):
            reader[0]

    def test_unknown_column(self, reader):
        reader.read()
        with pytest.raises(IndexError):
            reader['missing']

    def test_closed_reader(self, reader):
        reader.close()
        with pytest.raises(ValueError):
            reader.read()

    def test_no_result_set(self, fake_connection):
        cn = fake_connection()
        cursor = cn.cursor()
        cursor.execute('DELETE FROM t')
        reader = Reader(cursor)
        assert reader.field_count == 0
        assert not reader.read()


if __name__ == '__main__':
    __import__('pytest').main([__file__])
