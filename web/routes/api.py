"""JSON API routes for channels, stored videos, metrics, and video analysis."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import desc

from tools.channel_insights import ChannelInsightsGenerator
from tools.content_analyzer import VideoContentAnalyzer
from tools.video_metrics import compute_metrics, summarize_upload_patterns
from tools.youtube_fetch_channel_data import YouTubeChannelFetcher
from web.db import SessionLocal
from web.models import Channel, Video
from web.services.channel_service import load_video_rows, sync_channel, sync_channel_videos
from web.services.serializers import channel_to_dict, video_to_dict

api_bp = Blueprint("api", __name__)



def _json_error(message: str, status: int):
    return jsonify({"error": message}), status



def _upstream_error(action: str, exc: Exception):
    current_app.logger.warning("%s failed: %s", action, exc)
    return _json_error(str(exc), 502)



def _youtube_fetcher() -> YouTubeChannelFetcher:
    api_key = current_app.config.get("YOUTUBE_API_KEY", "")
    if not api_key:
        raise RuntimeError("YOUTUBE_API_KEY is missing")
    return YouTubeChannelFetcher(api_key)



def _truthy_arg(name: str) -> bool:
    return request.args.get(name, "").strip().lower() in {"1", "true", "yes", "on"}



def _channel_metrics(db_session, channel_id: str) -> dict:
    rows = load_video_rows(db_session, channel_id)
    metrics = compute_metrics(rows)
    metrics["uploadPatterns"] = summarize_upload_patterns(rows)
    return metrics


@api_bp.get("/api/channels")
def list_channels():
    db_session = SessionLocal()
    try:
        channels = db_session.query(Channel).order_by(desc(Channel.updated_at)).limit(200).all()
        return jsonify({"items": [channel_to_dict(channel) for channel in channels], "count": len(channels)})
    finally:
        db_session.close()


@api_bp.post("/api/channels")
def add_channel():
    payload = request.get_json(silent=True) or {}
    channel_url = str(payload.get("url") or request.form.get("url", "")).strip()
    if not channel_url:
        return _json_error("Channel URL is required.", 400)

    db_session = SessionLocal()
    try:
        channel, refreshed = sync_channel(
            db_session,
            channel_url,
            _youtube_fetcher(),
            current_app.config["REFRESH_INTERVAL_HOURS"],
        )
        current_app.logger.info("Channel %s stored (refreshed=%s)", channel.id, refreshed)
        body = channel_to_dict(channel)
        body["refreshed"] = refreshed
        return jsonify(body), 201
    except ValueError as exc:
        db_session.rollback()
        return _json_error(str(exc), 400)
    except Exception as exc:  # pylint: disable=broad-except
        db_session.rollback()
        return _upstream_error("Channel sync", exc)
    finally:
        db_session.close()


@api_bp.get("/api/channels/<channel_id>")
def get_channel(channel_id: str):
    db_session = SessionLocal()
    try:
        channel = db_session.get(Channel, channel_id)
        if channel is None:
            return _json_error("Channel not found.", 404)
        return jsonify(channel_to_dict(channel))
    finally:
        db_session.close()


@api_bp.delete("/api/channels/<channel_id>")
def delete_channel(channel_id: str):
    db_session = SessionLocal()
    try:
        channel = db_session.get(Channel, channel_id)
        if channel is None:
            return _json_error("Channel not found.", 404)

        db_session.delete(channel)
        db_session.commit()
        current_app.logger.info("Channel %s deleted", channel_id)
        return jsonify({"deleted": channel_id})
    finally:
        db_session.close()


@api_bp.get("/api/channels/<channel_id>/videos")
def list_channel_videos(channel_id: str):
    db_session = SessionLocal()
    try:
        if db_session.get(Channel, channel_id) is None:
            return _json_error("Channel not found.", 404)

        videos = (
            db_session.query(Video)
            .filter(Video.youtuber_id == channel_id)
            .order_by(desc(Video.published_at))
            .all()
        )
        return jsonify({"items": [video_to_dict(video) for video in videos], "count": len(videos)})
    finally:
        db_session.close()


@api_bp.post("/api/channels/<channel_id>/videos")
def collect_channel_videos(channel_id: str):
    db_session = SessionLocal()
    try:
        channel = db_session.get(Channel, channel_id)
        if channel is None:
            return _json_error("Channel not found.", 404)

        written, refreshed = sync_channel_videos(
            db_session,
            channel,
            _youtube_fetcher(),
            current_app.config["MAX_VIDEOS"],
            current_app.config["REFRESH_INTERVAL_HOURS"],
            force=_truthy_arg("force"),
        )
        total = db_session.query(Video).filter(Video.youtuber_id == channel_id).count()
        current_app.logger.info("Channel %s videos: %d written, refreshed=%s", channel_id, written, refreshed)
        return jsonify({"channel_id": channel_id, "written": written, "refreshed": refreshed, "count": total})
    except ValueError as exc:
        db_session.rollback()
        return _json_error(str(exc), 400)
    except Exception as exc:  # pylint: disable=broad-except
        db_session.rollback()
        return _upstream_error("Video collection", exc)
    finally:
        db_session.close()


@api_bp.get("/api/channels/<channel_id>/metrics")
def channel_metrics(channel_id: str):
    db_session = SessionLocal()
    try:
        if db_session.get(Channel, channel_id) is None:
            return _json_error("Channel not found.", 404)
        return jsonify(_channel_metrics(db_session, channel_id))
    finally:
        db_session.close()


@api_bp.get("/api/channels/<channel_id>/insights")
def channel_insights(channel_id: str):
    db_session = SessionLocal()
    try:
        channel = db_session.get(Channel, channel_id)
        if channel is None:
            return _json_error("Channel not found.", 404)

        metrics = _channel_metrics(db_session, channel_id)
        generator = ChannelInsightsGenerator(
            api_key=current_app.config.get("OPENAI_API_KEY", ""),
            model=current_app.config.get("OPENAI_MODEL"),
        )
        insights = generator.generate(channel_to_dict(channel), metrics)
        return jsonify({"channel_id": channel_id, "metrics": metrics, "insights": insights})
    finally:
        db_session.close()


@api_bp.get("/api/videos/<video_id>/analysis")
def video_analysis(video_id: str):
    api_key = current_app.config.get("YOUTUBE_API_KEY", "")
    if api_key:
        analyzer = VideoContentAnalyzer.from_api_key(api_key, current_app.config.get("GITHUB_TOKEN", ""))
    else:
        current_app.logger.warning("YOUTUBE_API_KEY is missing; video analysis will be degraded")
        analyzer = VideoContentAnalyzer()
    return jsonify(analyzer.analyze(video_id))
