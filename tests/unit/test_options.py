import pytest
import sqlalchemy as sa
from dbfacade.connection import create_url_from_options
from dbfacade.options import DatabaseOptions, iterdict_data_loader


def test_init_defaults():
    """Test default initialization"""
    options = DatabaseOptions(
        hostname='testhost',
        username='testuser',
        password='testpass',
        database='testdb',
        port=1234,
        timeout=30
    )

    assert options.drivername == 'postgresql'
    assert options.appname is not None
    assert options.attributes is None
    assert options.data_loader == iterdict_data_loader


def test_validation():
    """Test validation rules"""
    with pytest.raises(ValueError):
        DatabaseOptions(
            drivername='invalid',
            hostname='testhost',
            username='testuser',
            password='testpass',
            database='testdb',
        )

    with pytest.raises(ValueError):
        DatabaseOptions(drivername='postgresql', hostname='testhost')


def test_sqlite_options():
    """Test SQLite options validation"""
    options = DatabaseOptions(
        drivername='sqlite',
        database='test.db'
    )
    assert options.drivername == 'sqlite'
    assert options.database == 'test.db'

    with pytest.raises(ValueError):
        DatabaseOptions(drivername='sqlite')


def test_postgres_url_from_options():
    """Test URL construction for PostgreSQL"""
    options = DatabaseOptions(
        hostname='testhost',
        username='testuser',
        password='testpass',
        database='testdb',
        port=1234,
        timeout=30,
        appname='reporting'
    )
    url = create_url_from_options(options)

    assert isinstance(url, sa.URL)
    assert url.drivername == 'postgresql+psycopg'
    assert url.host == 'testhost'
    assert url.port == 1234
    assert url.username == 'testuser'
    assert url.password == 'testpass'
    assert url.database == 'testdb'
    assert url.query['connect_timeout'] == '30'
    assert url.query['application_name'] == 'reporting'


def test_postgres_url_without_port_or_timeout():
    options = DatabaseOptions(
        hostname='testhost',
        username='testuser',
        password='testpass',
        database='testdb',
    )
    url = create_url_from_options(options)

    assert url.port is None
    assert 'connect_timeout' not in url.query


def test_sqlite_url_from_options():
    """Test URL construction for SQLite"""
    options = DatabaseOptions(drivername='sqlite', database='/tmp/test.db')
    url = create_url_from_options(options)

    assert url.get_backend_name() == 'sqlite'
    assert url.database == '/tmp/test.db'


if __name__ == '__main__':
    __import__('pytest').main([__file__])
