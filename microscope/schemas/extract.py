from typing import Dict, List, Any, Optional
from pydantic import BaseModel


class ExtractRequest(BaseModel):
    url: Optional[str] = None
    urls: Optional[List[str]] = None
    html: Optional[str] = None
    htmls: Optional[List[str]] = None

    base_url: str = ""                # for html / htmls input
    charset: Optional[str] = None
    render: bool = False              # headless rendering for url / urls


class ExtractResponse(BaseModel):
    total: int
    results: Dict[str, Dict[str, Any]]
