import logging
import pathlib
import sys

import dbfacade as db
import pytest

from libb import Setting

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
sys.path.insert(0, str(HERE.parent))
import config

logger = logging.getLogger(__name__)


@pytest.fixture(scope='session')
def psql_docker(request):
    """Session-scoped PostgreSQL container using testcontainers.

    Skips the dependent tests when no container runtime is available.
    """
    try:
        from testcontainers.postgres import PostgresContainer
    except ImportError:
        pytest.skip('testcontainers is not installed')

    try:
        container = PostgresContainer(
            image='postgres:16',
            username=config.postgresql.username,
            password=config.postgresql.password,
            dbname=config.postgresql.database,
        )
        container.start()
    except Exception as e:
        logger.warning(f'Could not start postgres container: {e}')
        pytest.skip(f'PostgreSQL container unavailable: {e}')

    Setting.unlock()
    config.postgresql.hostname = container.get_container_host_ip()
    config.postgresql.port = int(container.get_exposed_port(5432))
    Setting.lock()

    logger.info(
        f'PostgreSQL container started at '
        f'{config.postgresql.hostname}:{config.postgresql.port}'
    )

    def finalizer():
        try:
            container.stop()
            logger.info('PostgreSQL container stopped')
        except Exception as e:
            logger.warning(f'Error stopping container: {e}')

    request.addfinalizer(finalizer)
    return container


def stage_test_data(cn):
    cn.update('drop table if exists test_table')
    cn.update("""
create table test_table (
    id serial primary key,
    name varchar(255) not null unique,
    value integer not null
)
""")
    cn.update("""
insert into test_table (name, value) values
('Alice', 10),
('Bob', 20),
('Charlie', 30)
""")


@pytest.fixture
def pg_conn(psql_docker):
    """
    Connection fixture with function scope for clean tests.
    Each test gets a fresh facade with reset test data.
    """
    cn = db.connect('postgresql', config=config)
    stage_test_data(cn)
    yield cn
    cn.close()
