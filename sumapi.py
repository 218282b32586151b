"""HTTP routes for the jsonsum daemon"""

import asyncio
import traceback

from aiohttp import web

import jsonvalid

# Bodies at or above this many bytes get a 413
DEFAULT_MAX_BODY_SIZE = 1024 * 1024

max_depth_key = web.AppKey("max_depth", int)

routes = web.RouteTableDef()

@routes.post("/sum")
async def sum_numbers(request: web.Request) -> web.Response:
    """Validate the body as JSON and reply with the numbers inside

    Replies with `{"integers": [...], "floating": [...]}`, or a 400 with
    `{"error": ..., "tail": ...}` when the body isn't valid JSON.

    """
    data = await request.read()
    # Validation runs in a worker thread
    try:
        numbers = await asyncio.to_thread(
            jsonvalid.validate,
            data,
            max_depth=request.app[max_depth_key],
        )
    except jsonvalid.ParseError as e:
        print(f"Rejected body from {request.remote}: {e}")
        return web.json_response({"error": str(e), "tail": e.tail}, status=400)
    return web.json_response(numbers._asdict())

@web.middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as error:
        print(f"Error handling {request.method} {request.path}:")
        traceback.print_exception(None, error, error.__traceback__)
        return web.json_response({"error": repr(error)}, status=500)

def make_app(
    *,
    max_depth: int = jsonvalid.DEFAULT_MAX_DEPTH,
    max_body_size: int = DEFAULT_MAX_BODY_SIZE,
) -> web.Application:
    app = web.Application(
        client_max_size=max_body_size,
        middlewares=[error_middleware],
    )
    app[max_depth_key] = max_depth
    app.add_routes(routes)
    return app
