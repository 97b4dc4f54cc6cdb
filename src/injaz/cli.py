"""Command line entry point.

Usage:
    # Serve the HTTP API
    injaz serve --port=8000

    # Create tables
    injaz init-db

    # Import a transactions CSV as a given user
    injaz import-csv transactions.csv --user=<uid>

    # Fill in derived payment fields and rebuild VAT liabilities
    injaz backfill

    # Ask the assistant a single question
    injaz chat "How much did we receive this month?" --user=<uid>
"""

import argparse
import asyncio
import inspect
import json
import sys
from pathlib import Path

import structlog

from injaz.config import configure_logging, get_settings

logger = structlog.get_logger(__name__)


def _serve(args: argparse.Namespace) -> None:
    import uvicorn

    from injaz.api.main import create_app

    settings = get_settings()
    uvicorn.run(
        create_app(),
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        log_config=None,
    )


def _init_db(args: argparse.Namespace) -> None:
    from injaz.db.session import init_db

    init_db()
    logger.info("database_initialized", url=get_settings().database_url)


def _import_csv(args: argparse.Namespace) -> None:
    from injaz.db.session import init_db, session_scope
    from injaz.importer import import_csv

    init_db()
    csv_text = Path(args.file).read_text(encoding="utf-8-sig")
    with session_scope() as session:
        stats = import_csv(session, csv_text, args.user)
    print(json.dumps(stats, indent=2))


def _backfill(args: argparse.Namespace) -> None:
    from injaz.backfill import backfill_financials
    from injaz.db.session import init_db, session_scope

    init_db()
    with session_scope() as session:
        result = backfill_financials(session)
    print(json.dumps(result, indent=2, default=str))


async def _chat(args: argparse.Namespace) -> None:
    from injaz.assistant.orchestrator import ConversationOrchestrator
    from injaz.assistant.prompts import build_system_prompt
    from injaz.clients.gemini import GeminiClient
    from injaz.db.session import get_session_factory, init_db
    from injaz.services import conversations
    from injaz.services.users import get_or_create_organization
    from injaz.tools.executor import ExecutionContext, ToolExecutor

    init_db()
    session = get_session_factory()()
    try:
        org_id = args.org or get_or_create_organization(session).id
        session.commit()
        executor = ToolExecutor(ExecutionContext(org_id=org_id, user_id=args.user, session=session))
        orchestrator = ConversationOrchestrator(GeminiClient(), executor)
        reply = await orchestrator.run(
            [{"role": "user", "content": args.prompt}],
            build_system_prompt(conversations.extra_system_prompt(session)),
        )
    finally:
        session.close()

    print(reply.content)
    for result in reply.tool_results:
        print(json.dumps(result, indent=2, default=str))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="injaz",
        description="Injaz business management backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default=None, help="Bind address (default: API_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: API_PORT)")
    serve.set_defaults(handler=_serve)

    init = commands.add_parser("init-db", help="Create database tables")
    init.set_defaults(handler=_init_db)

    importer = commands.add_parser("import-csv", help="Import transactions from a CSV file")
    importer.add_argument("file", type=str, help="Path to the CSV export")
    importer.add_argument("--user", type=str, required=True, help="User id recorded as creator")
    importer.set_defaults(handler=_import_csv)

    backfill = commands.add_parser("backfill", help="Backfill payment tax fields and VAT liabilities")
    backfill.set_defaults(handler=_backfill)

    chat = commands.add_parser("chat", help="Ask the assistant a single question")
    chat.add_argument("prompt", type=str, help="What to ask")
    chat.add_argument("--org", type=str, default=None, help="Organization id (default: first)")
    chat.add_argument("--user", type=str, default=None, help="Acting user id")
    chat.set_defaults(handler=_chat)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        if inspect.iscoroutinefunction(args.handler):
            asyncio.run(args.handler(args))
        else:
            args.handler(args)
    except KeyboardInterrupt:
        logger.info("interrupted")
    except Exception as e:
        logger.exception("command_failed", command=args.command, error=str(e))
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
