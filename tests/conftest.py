import pytest
from dotenv import load_dotenv

from fakes import hex_id
from models.knowledge import SourceDescriptor

# Load environment variables from .env file for tests
load_dotenv()


@pytest.fixture
def manga_source():
    return SourceDescriptor(source_id=hex_id("a"), display_name="漫画", usage_hint="読んだ漫画の記録")


@pytest.fixture
def anime_source():
    return SourceDescriptor(source_id=hex_id("b"), display_name="アニメ", usage_hint="見たアニメ")
