from __future__ import annotations

from functools import wraps

from flask import g, jsonify, request

from .response_cache import CacheTag, ResponseCache

BYPASS_PARAM = "fresh"


def wants_fresh() -> bool:
    if request.args.get(BYPASS_PARAM, "").lower() in {"1", "true", "yes"}:
        return True
    return "no-cache" in request.headers.get("Cache-Control", "").lower()


def cached_view(cache: ResponseCache, tag: CacheTag, *, per_user: bool = True):
    """Cache the JSON body a view returns under `tag`.

    The wrapped view returns a plain dict/list on success (cached and
    jsonified here) or a ready response tuple on failure (passed through,
    never cached). Must sit under the auth guard so `g.current_user` is set.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = getattr(g, "current_user", None)
            identity = user.register_number if (per_user and user is not None) else None
            params = {k: v for k, v in request.args.to_dict(flat=False).items() if k != BYPASS_PARAM}
            params.update({f"path:{k}": v for k, v in kwargs.items()})
            key = cache.make_key(tag, identity, params)

            if not wants_fresh():
                hit = cache.get(key)
                if hit is not None:
                    return jsonify(hit)

            generation = cache.generation(tag)
            result = view(*args, **kwargs)
            if isinstance(result, (dict, list)):
                cache.set(key, result, generation=generation)
                return jsonify(result)
            return result

        return wrapper

    return decorator
