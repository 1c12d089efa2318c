from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Content store settings
    content_store_path: str = "data/content.json"

    # Search backend settings
    search_url: str = "http://localhost:9200"
    search_index: str = "content"
    search_timeout: float = 5.0  # seconds, applied to every search backend call
    search_probe_timeout: float = 2.0  # seconds, startup reachability probe only

    # Related content settings
    similarity_threshold: float = 0.3
    max_related_items: int = 10
    graph_neighbor_limit: int = 10
    graph_similarity_threshold: float = 0.2
    graph_max_depth: int = 2
    graph_max_nodes: int = 50

    # Aging settings
    freshness_threshold: float = 0.3
    broken_link_sample_rate: float = 0.1

    # Batch settings
    batch_workers: int = 4

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
