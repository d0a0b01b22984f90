"""Canned Supadata and Apify API payloads for testing."""

from __future__ import annotations

from typing import Any


def create_supadata_metadata(**overrides: Any) -> dict[str, Any]:
    """Supadata /metadata body for a TikTok video."""
    body: dict[str, Any] = {
        "platform": "tiktok",
        "type": "video",
        "id": "7234567890123456789",
        "title": "Garlic Butter Pasta",
        "description": "Garlic butter pasta! 200g spaghetti, 3 tbsp butter",
        "author": {"username": "chef", "displayName": "Chef Jo"},
        "stats": {"views": 12000, "likes": 900},
        "media": {
            "type": "video",
            "duration": 45,
            "thumbnailUrl": "https://cdn.example.com/thumb.jpg",
            "url": "https://cdn.example.com/video.mp4",
        },
    }
    body.update(overrides)
    return body


SUPADATA_CAROUSEL_METADATA: dict[str, Any] = create_supadata_metadata(
    type="carousel",
    media={
        "type": "carousel",
        "items": [
            {"type": "image", "url": "https://cdn.example.com/1.jpg"},
            {"type": "video", "url": "https://cdn.example.com/2.mp4"},
            {"type": "image", "url": "https://cdn.example.com/3.jpg"},
        ],
    },
)

SUPADATA_TRANSCRIPT_SEGMENTS: list[dict[str, Any]] = [
    {"text": "then add the garlic", "offset": 4000},
    {"text": "first boil the pasta", "offset": 0},
]


def create_apify_run(status: str = "RUNNING", **overrides: Any) -> dict[str, Any]:
    """Apify actor run envelope."""
    run: dict[str, Any] = {
        "id": "run-123",
        "status": status,
        "defaultDatasetId": "dataset-456",
    }
    run.update(overrides)
    return {"data": run}


TIKTOK_ITEM: dict[str, Any] = {
    "text": "Garlic butter pasta #recipe",
    "covers": ["https://cdn.example.com/cover.jpg"],
    "videoUrl": "https://cdn.example.com/video.mp4",
    "videoMeta": {"duration": 45},
    "authorMeta": {"nickName": "Chef Jo", "name": "chef"},
    "diggCount": 900,
    "playCount": 12000,
}

TIKTOK_SLIDESHOW_ITEM: dict[str, Any] = {
    "text": "Recipe in the slides",
    "imagePost": {
        "images": [
            {"url": "https://cdn.example.com/slide1.jpg"},
            "https://cdn.example.com/slide2.jpg",
        ]
    },
}

INSTAGRAM_ITEM: dict[str, Any] = {
    "caption": "Creamy tuscan chicken",
    "displayUrl": "https://cdn.example.com/display.jpg",
    "videoUrl": "https://cdn.example.com/reel.mp4",
    "videoDuration": 30.5,
    "ownerUsername": "chef",
    "likesCount": 500,
    "videoViewCount": 8000,
}
