"""CLI entry point for the autopilot API server and job worker."""

import argparse
import asyncio
import os
import sys
from types import SimpleNamespace


def _serve(args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run("autopilot.main:app", host=args.host, port=args.port)


async def _run_worker(once: bool) -> None:
    from autopilot.config import settings
    from autopilot.db.engine import create_db_engine, create_session_factory, create_tables
    from autopilot.main import build_runtime
    from autopilot.workers.scheduler import run_forever

    engine = create_db_engine()
    if "sqlite" in settings.effective_database_url:
        await create_tables(engine)
    runtime = SimpleNamespace()
    build_runtime(runtime, create_session_factory(engine))
    try:
        if once:
            results = await runtime.job_runner.run_once()
            print(f"Processed {len(results)} job(s)")
        else:
            await run_forever(runtime.job_runner, settings.worker_poll_interval)
    finally:
        await engine.dispose()


async def _create_key(seller_id: str, name: str) -> None:
    from autopilot.config import settings
    from autopilot.db.engine import create_db_engine, create_session_factory, create_tables
    from autopilot.repositories.api_key_repo import ApiKeyRepository
    from autopilot.services.auth_gate import generate_api_key, hash_api_key
    from autopilot.services.id_generator import generate_id

    engine = create_db_engine()
    if "sqlite" in settings.effective_database_url:
        await create_tables(engine)
    raw_key = generate_api_key()
    try:
        async with create_session_factory(engine)() as session:
            row = await ApiKeyRepository(session).create(
                key_id=generate_id("key_"),
                seller_id=seller_id,
                name=name,
                key_hash=hash_api_key(raw_key),
                is_active=True,
            )
            await session.commit()
    finally:
        await engine.dispose()
    print(f"{row.key_id}\t{raw_key}")
    print("Store this key securely. It cannot be retrieved again.", file=sys.stderr)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="autopilot-server",
        description="Dropship autopilot API server and job worker",
    )
    parser.add_argument(
        "--local",
        action="store_true",
        help="Local dev mode: SQLite database",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    serve.add_argument("--port", type=int, default=8080, help="Bind port (default: 8080)")

    worker = sub.add_parser("worker", help="Run the job worker without the HTTP API")
    worker.add_argument("--once", action="store_true", help="Process one batch and exit")

    create_key = sub.add_parser("create-key", help="Create an API key for a seller")
    create_key.add_argument("--seller", required=True, help="Owning seller id")
    create_key.add_argument("--name", default="cli", help="Key label")

    args = parser.parse_args(argv)

    if args.local:
        os.environ["AUTOPILOT_LOCAL_MODE"] = "1"
        os.environ["AUTOPILOT_LOCAL"] = "1"

    if args.command == "serve":
        _serve(args)
    elif args.command == "worker":
        asyncio.run(_run_worker(args.once))
    else:
        asyncio.run(_create_key(args.seller, args.name))


if __name__ == "__main__":
    main()
