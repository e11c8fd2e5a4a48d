
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    llm_base_url: str = "https://api.openai.com/v1"
    llm_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    llm_model: str = "gpt-4o-mini"
    llm_max_tokens: int = 2000
    llm_temperature: float = 0.2

    # "openai" or "sentence-transformers"
    embedding_provider: str = "openai"
    embedding_model: str = "text-embedding-3-small"
    embedding_max_request_tokens: int = 8191
    embedding_batch_ratio: float = 0.8

    max_chunk_tokens: int = 7000
    semantic_groups: bool = False
    min_group_functions: int = 3

    vector_top_k: int = 20
    keyword_top_k: int = 15
    merge_limit: int = 30
    rerank_batch_size: int = 5
    rerank_preview_chars: int = 500
    final_top_k: int = 20

    context_budget: int = 8000
    overview_ratio: float = 0.1

    data_dir: str = "./rag-data"

    debug: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True


settings = Settings()
