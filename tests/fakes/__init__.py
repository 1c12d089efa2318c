from tests.fakes.fake_content_store import FakeContentStore
from tests.fakes.fake_link_checker import FakeLinkChecker
from tests.fakes.fake_search_backend import FakeSearchBackend

__all__ = ["FakeContentStore", "FakeLinkChecker", "FakeSearchBackend"]
