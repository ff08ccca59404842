from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from animeproxy.cache import TTLCache
from animeproxy.comments import CommentStore, RateLimiter
from animeproxy.config import Settings
from animeproxy.errors import AnimeProxyError, InvalidComment
from animeproxy.fetcher import PageFetcher
from animeproxy.resolver import AnimeResolver
from animeproxy.videos import VideoServerParser

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    fetcher: Optional[PageFetcher] = None,
    cache: Optional[TTLCache] = None,
    comments: Optional[CommentStore] = None,
    limiter: Optional[RateLimiter] = None,
) -> Flask:
    settings = settings or Settings.from_env()
    if fetcher is None:
        fetcher = PageFetcher(timeout=settings.timeout)
    if cache is None:
        cache = TTLCache(default_ttl=settings.anime_ttl)
    if comments is None:
        comments = CommentStore(settings.comments_path)
    if limiter is None:
        limiter = RateLimiter(settings.comment_interval)

    app = Flask(__name__)
    CORS(app, origins="*", send_wildcard=True, methods=["GET", "POST", "OPTIONS"], allow_headers=["Content-Type", "Authorization"])

    resolver = AnimeResolver(fetcher, cache, settings.base_url, ttl=settings.anime_ttl)
    videos = VideoServerParser(fetcher, cache, settings.base_url, ttl=settings.videos_ttl)

    app.config["SETTINGS"] = settings
    app.extensions["animeproxy"] = {
        "cache": cache,
        "resolver": resolver,
        "videos": videos,
        "comments": comments,
        "limiter": limiter,
    }

    @app.errorhandler(AnimeProxyError)
    def handle_proxy_error(error: AnimeProxyError):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return error
        logger.exception("Unhandled error on %s", request.path)
        return jsonify({"success": False, "error": "internal_error", "message": "Internal server error."}), 500

    @app.route("/")
    def index():
        return Response("Anime API server is running.", mimetype="text/plain")

    @app.route("/api/health")
    def health():
        return Response(status=200)

    @app.route("/api/anime/<path:title>")
    def anime(title):
        return jsonify(resolver.resolve(title).to_dict())

    @app.route("/api/videos/<slug>/<episode>")
    def episode_videos(slug, episode):
        servers = videos.get_servers(slug, episode)
        return jsonify({
            "success": True,
            "default": servers[0].name,
            "servers": [{"name": s.name, "url": s.url} for s in servers],
        })

    @app.route("/api/comments/<content_id>", methods=["GET"])
    def list_comments(content_id):
        return jsonify({"success": True, "comments": [c.to_dict() for c in comments.list(content_id)]})

    @app.route("/api/comments/<content_id>", methods=["POST"])
    def add_comment(content_id):
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise InvalidComment()
        client_key = request.remote_addr or "unknown"
        limiter.check(client_key)
        comment = comments.add(content_id, data.get("author", ""), data.get("text", ""))
        limiter.record(client_key)
        return jsonify({"success": True, "comment": comment.to_dict()}), 201

    return app


def run(settings: Optional[Settings] = None):
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app(settings)
    logger.info("Server running on http://%s:%s", settings.host, settings.port)
    app.run(debug=False, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
