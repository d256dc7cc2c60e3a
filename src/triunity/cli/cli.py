# src/triunity/cli/cli.py
import argparse
import json
import sys
from typing import List, Optional

from ..config.service_config import ServiceConfig
from ..monitoring.logging_config import LogConfig
from ..telemetry.clock import SystemClock, make_random_source
from ..telemetry.generators import READ_GENERATORS, GeneratorContext, run_operation
from ..telemetry.profiles import PROFILES, get_profile
from ..api.envelope import build_metadata, envelope_extras, success_envelope


class CLI:
    def main(self, args: List[str]) -> int:
        parser = self.create_parser()
        args = parser.parse_args(args)

        if not hasattr(args, 'func'):
            parser.print_help()
            return 1

        return args.func(args) or 0

    def create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(description='TriUnity telemetry API')
        subparsers = parser.add_subparsers(title='commands', dest='command')

        serve = subparsers.add_parser('serve', help='Run the HTTP API')
        serve.add_argument('--host', help='Bind address (default from config)')
        serve.add_argument('--port', type=int, help='Bind port (default from config)')
        serve.add_argument('--config', help='Path to YAML configuration')
        serve.add_argument('--profile', choices=sorted(PROFILES), help='API profile')
        serve.set_defaults(func=self.serve)

        snapshot = subparsers.add_parser('snapshot', help='Print one response envelope')
        snapshot.add_argument('operation', choices=sorted(READ_GENERATORS), help='Operation to run')
        snapshot.add_argument('--profile', choices=sorted(PROFILES), default=None, help='API profile')
        snapshot.add_argument('--seed', type=int, help='Seed for reproducible output')
        snapshot.add_argument('--time-ms', type=int, help='Epoch milliseconds to synthesize at')
        snapshot.set_defaults(func=self.snapshot)

        profiles = subparsers.add_parser('profiles', help='List available profiles')
        profiles.set_defaults(func=self.list_profiles)

        return parser

    def serve(self, args) -> int:
        import uvicorn
        from ..api.server import create_app

        config = ServiceConfig(args.config)
        if args.profile:
            config.config["telemetry"]["profile"] = args.profile

        LogConfig(
            log_dir=config.get("monitoring.log_dir"),
            level=config.get("monitoring.log_level", "INFO")
        ).setup_logging()

        app = create_app(config)
        metrics_port = int(config.get("monitoring.metrics_port") or 0)
        if metrics_port:
            app.state.metrics.start_server(metrics_port)

        uvicorn.run(
            app,
            host=args.host or config.get("server.host"),
            port=args.port or int(config.get("server.port")),
        )
        return 0

    def snapshot(self, args) -> int:
        config = ServiceConfig.from_dict({})
        profile = get_profile(args.profile or config.profile_name)
        if args.operation not in profile.operations:
            print(
                f"Error: profile '{profile.name}' has no '{args.operation}' operation",
                file=sys.stderr
            )
            return 2

        now_ms = args.time_ms if args.time_ms is not None else SystemClock().now_ms()
        rng = make_random_source(args.seed)
        ctx = GeneratorContext(now_ms=now_ms, rng=rng, profile=profile)

        data = run_operation(args.operation, ctx)
        envelope = success_envelope(
            data,
            now_ms,
            build_metadata(now_ms, rng, profile, config),
            **envelope_extras(args.operation, data, profile)
        )
        print(json.dumps(envelope, indent=2))
        return 0

    def list_profiles(self, args) -> int:
        for name, profile in PROFILES.items():
            operations = ", ".join(
                f"{op} ({'/'.join(methods)})" for op, methods in profile.operations.items()
            )
            print(f"{name:<10} api {profile.api_version}: {operations}")
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    return CLI().main(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":
    sys.exit(main())
