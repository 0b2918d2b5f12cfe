import pytest

from dragevents.data.database import migrate, open_db
from dragevents.data.repository import Repository
from dragevents.data.seed import seed


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "db" / "test.sqlite"


@pytest.fixture
def engine(db_path):
    engine = open_db(db_path)
    migrate(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repo(engine):
    return Repository(engine)


@pytest.fixture
def seeded_repo(repo):
    seed(repo)
    return repo


@pytest.fixture
def track_id(repo):
    return repo.create_track("Test Track", "Test City", "123 Test St", "https://test.com")


@pytest.fixture
def write_csv(tmp_path):
    """Write text to a CSV file under tmp_path and return its path."""
    def _write(name, text):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write
