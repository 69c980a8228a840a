"""
Command Line Interface for boxrunner.
"""
import logging
import os
import tempfile
import time
import uuid

import click

from ..ENGINE.docker_engine import DockerEngineClient
from ..errors import BoxError
from ..MANAGERS.box import Box
from ..MANAGERS.box_orchestrator import BoxOrchestrator
from ..MODELS.box_config import BoxConfig
from ..MODELS.pipeline_options import EngineOptions, PipelineOptions
from ..PARSERS.pipeline_parser import PipelineParser
from ..STORE.local_store import LocalStore
from ..UTILS.context import PipelineContext
from ..UTILS.emitter import LOGS
from ..UTILS.environment import Environment
from ..UTILS.port_translation import exposed_port_maps


def _engine(ctx):
    """The shared engine client, created on first use."""
    if 'engine' not in ctx.obj:
        ctx.obj['engine'] = DockerEngineClient(ctx.obj['engine_options'])
    return ctx.obj['engine']


@click.group()
@click.option('--file', '-f', default='boxrunner.yml', help='Pipeline file path')
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
@click.option('--docker-host', envvar='DOCKER_HOST', default='', help='Engine address')
@click.option('--docker-local', is_flag=True, help='Use local images only, never pull')
@click.option('--dns', multiple=True, help='DNS server for containers')
@click.pass_context
def cli(ctx, file, verbose, docker_host, docker_local, dns):
    """
    Boxrunner - ephemeral pipeline containers.

    Provisions a box and its services, and tears them down again.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj['file'] = file

    engine_options = EngineOptions.from_env()
    if docker_host:
        engine_options.host = docker_host
    if docker_local:
        engine_options.local = True
    if dns:
        engine_options.dns = list(dns)
    ctx.obj['engine_options'] = engine_options


@cli.command()
@click.option('--pipeline-id', default=None, help='Pipeline identifier (random by default)')
@click.option('--publish', '-p', multiple=True, help='Publish a port: [ip:][host:]container')
@click.option('--direct-mount', is_flag=True, help='Mount the working directory read-write')
@click.option('--commit', default=None, help='Commit the box to repository[:tag] on teardown')
@click.option('--env-file', default=None, help='.env file added to the pipeline environment')
@click.option('--detach', '-d', is_flag=True, help='Leave the containers running')
@click.pass_context
def up(ctx, pipeline_id, publish, direct_mount, commit, env_file, detach):
    """Start the box and its services."""
    parser = PipelineParser()
    path = ctx.obj['file']
    if not os.path.exists(path):
        click.echo(f"Error: {path} not found.", err=True)
        ctx.exit(1)

    try:
        config = parser.parse(path)
    except BoxError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    host_root = os.path.join(os.path.dirname(os.path.abspath(path)), config.source_dir)
    options = PipelineOptions(
        pipeline_id=pipeline_id or uuid.uuid4().hex[:12],
        host_root=host_root,
        direct_mount=direct_mount,
        publish_ports=list(publish),
        should_commit=bool(commit),
    )

    env = Environment.from_os()
    if env_file:
        env.update(dict(Environment.from_file(env_file).items()))

    context = PipelineContext()
    context.emitter.on(LOGS, click.echo)

    try:
        orchestrator = BoxOrchestrator(config, options, ctx.obj['engine_options'], _engine(ctx))
    except BoxError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        container = orchestrator.up(context, env)
    except BoxError as e:
        click.echo(f"Error: {e}", err=True)
        orchestrator.box.stop()
        try:
            orchestrator.box.clean()
        except BoxError as clean_error:
            click.echo(f"Error during cleanup: {clean_error}", err=True)
        ctx.exit(1)

    click.echo(f"Box {orchestrator.box.get_name()} running in container {container.id}")
    for port in orchestrator.ports():
        click.echo(f"  {port.container_port} -> {port.host_uri}")

    if detach:
        return

    click.echo("Running... Press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        click.echo("\nStopping box...")
    try:
        image = orchestrator.down(commit=commit)
    except BoxError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    if image is not None:
        click.echo(f"Committed {image.id}")


@cli.command()
@click.option('--publish', '-p', multiple=True, help='Publish a port: [ip:][host:]container')
@click.pass_context
def ports(ctx, publish):
    """Show where published ports are reachable."""
    try:
        port_maps = exposed_port_maps(ctx.obj['engine_options'].host, list(publish))
    except BoxError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(f"{'CONTAINER':10} {'HOST':25}")
    click.echo("-" * 36)
    for port in port_maps:
        click.echo(f"{port.container_port:10} {port.host_uri:25}")


@cli.command()
@click.argument('name')
@click.option('--store', 'store_dir', required=True, help='Directory to store the export in')
@click.option('--key', default=None, help='Key under the store (defaults to NAME.tar)')
@click.pass_context
def export(ctx, name, store_dir, key):
    """Export image NAME as a tarball into a local store."""
    key = key or f"{name.replace(':', '_').replace('/', '_')}.tar"
    try:
        box = Box(BoxConfig(id=name), PipelineOptions(pipeline_id="export"),
                  ctx.obj['engine_options'], _engine(ctx))
        with tempfile.TemporaryDirectory() as tmp:
            export_path = os.path.join(tmp, "image.tar")
            with open(export_path, "wb") as f:
                box.export_image(box.get_name(), f)
            stored = LocalStore(store_dir).store_from_file(export_path, key)
    except BoxError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    click.echo(f"Stored {name} at {stored}")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
