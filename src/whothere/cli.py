"""whothere CLI entry point."""

import click

from .commands import config, enrich, geo, headers, perf, routes, version
from .config import LOG_LEVELS, WhoThereConfig, load_config
from .exceptions import ConfigError
from .utils.logger import configure_logging


@click.group()
@click.option("--config", "-c", "config_path", default=None, help="Config file path (whothere.yaml)")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None,
              help="Log level for stderr output (overrides config)")
@click.option("--json-logs", is_flag=True, help="Write logs as JSON lines")
@click.pass_context
def main(ctx, config_path, log_level, json_logs):
    """whothere - who is behind a request.

    Resolves the real client IP behind proxies and CDNs, estimates a
    privacy-respecting location, and analyzes request paths.
    """
    try:
        cfg = load_config(config_path, exit_on_error=False)
    except ConfigError as e:
        # "config validate" must still run against a broken file
        if ctx.invoked_subcommand != "config":
            raise click.ClickException(str(e)) from e
        cfg = WhoThereConfig()
    configure_logging(
        log_level=(log_level or cfg.log_level).upper(),
        json_output=json_logs or cfg.json_logs,
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


main.add_command(enrich)
main.add_command(headers)
main.add_command(geo)
main.add_command(routes)
main.add_command(perf)
main.add_command(config)
main.add_command(version)


if __name__ == "__main__":
    main()
