import argparse
import json
import logging
import sys
import uuid
from typing import List, Optional

from core.app_context import AppContext
from core.config_loader import AppConfig, load_config
from core.exceptions import ServiceException, exit_code_for
from database import database
from database.init_db import init_db

logger = logging.getLogger(__name__)


def _score(value) -> Optional[str]:
    return str(value) if value is not None else None


def _print(payload: dict) -> None:
    print(json.dumps(payload, indent=2, default=str))


def cmd_init_db(ctx: AppContext, args) -> None:
    init_db()
    _print({'success': True})


def cmd_register_sample(ctx: AppContext, args) -> None:
    sample = ctx.samples.register(
        event_id=args.event_id,
        applicant_id=args.applicant_id,
        category_id=args.category_id,
        name=args.name,
        description=args.description,
    )
    if args.submit:
        sample = ctx.samples.submit(sample.id)
    _print({
        'id': sample.id,
        'sequential_number': sample.sequential_number,
        'status': sample.status.value,
    })


def cmd_activate(ctx: AppContext, args) -> None:
    session = ctx.sessions.activate(
        sample_id=args.sample_id,
        commission_id=args.commission_id,
        requesting_user_id=args.user_id,
        event_id=args.event_id,
    )
    _print({'session_id': session.id, 'status': session.status.value, 'activated_at': session.activated_at})


def cmd_complete_session(ctx: AppContext, args) -> None:
    session = ctx.sessions.complete(args.session_id)
    _print({'session_id': session.id, 'status': session.status.value, 'completed_at': session.completed_at})


def cmd_calculate(ctx: AppContext, args) -> None:
    result = ctx.scoring.calculate(args.sample_id)
    _print({
        'product_sample_id': result.product_sample_id,
        'score': _score(result.score),
        'evaluation_count': result.evaluation_count,
        'calculated_at': result.calculated_at,
    })


def cmd_calculate_event(ctx: AppContext, args) -> None:
    results = ctx.scoring.calculate_event(args.event_id)
    _print({
        'event_id': args.event_id,
        'results': [
            {
                'product_sample_id': r.product_sample_id,
                'score': _score(r.score),
                'evaluation_count': r.evaluation_count,
            }
            for r in results
        ],
    })


def cmd_generate_protocol(ctx: AppContext, args) -> None:
    protocol = ctx.protocols.generate(args.sample_id, args.issuer_id)
    _print({
        'protocol_id': protocol.id,
        'protocol_number': protocol.protocol_number,
        'version': protocol.version,
        'final_score': _score(protocol.final_score),
        'status': protocol.status.value,
    })


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Food evaluation session & scoring engine")
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('init-db', help='Create database tables')
    p.set_defaults(func=cmd_init_db)

    p = sub.add_parser('register-sample', help='Register a product sample for an event')
    p.add_argument('--event-id', type=uuid.UUID, required=True)
    p.add_argument('--applicant-id', type=uuid.UUID, required=True)
    p.add_argument('--category-id', type=uuid.UUID, default=None)
    p.add_argument('--name', type=str, required=True)
    p.add_argument('--description', type=str, default=None)
    p.add_argument('--submit', action='store_true', help='Submit the sample right away')
    p.set_defaults(func=cmd_register_sample)

    p = sub.add_parser('activate', help='Open an evaluation session for a sample')
    p.add_argument('--sample-id', type=uuid.UUID, required=True)
    p.add_argument('--commission-id', type=uuid.UUID, required=True)
    p.add_argument('--user-id', type=uuid.UUID, required=True)
    p.add_argument('--event-id', type=uuid.UUID, default=None)
    p.set_defaults(func=cmd_activate)

    p = sub.add_parser('complete-session', help='Complete an active evaluation session')
    p.add_argument('--session-id', type=uuid.UUID, required=True)
    p.set_defaults(func=cmd_complete_session)

    p = sub.add_parser('calculate', help='Calculate the final score of a sample')
    p.add_argument('--sample-id', type=uuid.UUID, required=True)
    p.set_defaults(func=cmd_calculate)

    p = sub.add_parser('calculate-event', help='Calculate the final scores of every sample in an event')
    p.add_argument('--event-id', type=uuid.UUID, required=True)
    p.set_defaults(func=cmd_calculate_event)

    p = sub.add_parser('generate-protocol', help='Issue the protocol of an evaluated sample')
    p.add_argument('--sample-id', type=uuid.UUID, required=True)
    p.add_argument('--issuer-id', type=uuid.UUID, required=True)
    p.set_defaults(func=cmd_generate_protocol)

    return parser


def configure_logging(config: AppConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format=config.logging.format
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    configure_logging(config)
    database.configure(config.database.url, echo=config.database.echo)

    try:
        ctx = AppContext.build(config)
        args.func(ctx, args)
    except ServiceException as e:
        logger.error(f"{args.command} failed: {e.__class__.__name__}: {e.message}")
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return exit_code_for(e)
    return 0


if __name__ == "__main__":
    sys.exit(main())
