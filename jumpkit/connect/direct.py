"""
Interactive (or output-capturing) SSH sessions to EC2 instances.

Instances with a public address are reached directly unless the jump host is
forced; everything else goes through the environment's jump host with agent
forwarding, targeting the private address.
"""
from __future__ import annotations

import os
import subprocess
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from jumpkit.core.errors import ClientNotFound, ConfigurationError, OutputWriteError, SessionError
from jumpkit.core.matcher import match_environment
from jumpkit.core.models import Configuration, ConnectionParams, Instance, Outcome
from jumpkit.discovery import EC2Finder, discover
from jumpkit.utils.logging import get_logger
from .dispatch import prepare_args
from .selector import select_and_apply

logger = get_logger(__name__)

BEANSTALK_TAG = "elasticbeanstalk:environment-name"
FALLBACK_USER = "ubuntu"

COLUMNS = ("Name", "Id", "PublicName", "PrivateName", "Type")

Runner = Callable[..., subprocess.CompletedProcess]


def instance_row(instance: Instance) -> Tuple[str, ...]:
    return (
        instance.name,
        instance.instance_id,
        instance.public_address or "",
        instance.private_address or "",
        instance.instance_type,
    )


def login_users(instance: Instance) -> List[str]:
    users = []
    if BEANSTALK_TAG in instance.tags:
        users.append("ec2-user")
    return users + [FALLBACK_USER]


def key_path(instance: Instance) -> Optional[str]:
    if not instance.key_name:
        return None
    return os.path.join(os.path.expanduser("~"), ".ssh", f"{instance.key_name}.pem")


def ssh_route(instance: Instance, config: Configuration, use_jump_host: bool = False) -> Tuple[str, List[str]]:
    """Return the host to log into and the ssh arguments that reach it."""
    if instance.public_address and not use_jump_host:
        return instance.public_address, []

    jump_host = match_environment(instance.name, config.environments).jump_host
    if not instance.private_address:
        raise ConfigurationError(f"{instance.name} ({instance.instance_id}) has no private address")
    logger.info(f"no public DNS name found, using jump host: {jump_host}")
    return instance.private_address, ["-A", "-J", jump_host]


def build_ssh_command(
    user: str,
    host: str,
    route_args: Sequence[str],
    remote_args: Sequence[str],
    key: Optional[str] = None,
    connect_timeout: int = 10,
) -> List[str]:
    cmd = ["ssh", *route_args]
    if key:
        cmd.extend(["-i", key])
    cmd.extend([f"{user}@{host}", "-o", f"ConnectTimeout={connect_timeout}"])
    cmd.extend(remote_args)
    return cmd


def output_filename(instance: Instance, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"output-{instance.name}-{now.strftime('%Y-%m-%dT%H-%M-%SZ')}.txt"


def save_output(instance: Instance, content: bytes, output_dir: str = ".", now: Optional[datetime] = None) -> str:
    path = os.path.join(output_dir, output_filename(instance, now))
    try:
        with open(path, "wb") as fh:
            fh.write(content)
    except OSError as e:
        raise OutputWriteError(f"could not write {path}: {e}") from e
    logger.info(f"saved output to: {path}")
    return path


class DirectConnector:
    def __init__(self, config: Configuration, runner: Runner = subprocess.run, output_dir: str = "."):
        self.config = config
        self.runner = runner
        self.output_dir = output_dir

    def _attempt(self, instance: Instance, cmd: List[str], capture: bool) -> bool:
        logger.info(f"connecting {' '.join(cmd[1:])}")
        try:
            if not capture:
                return self.runner(cmd).returncode == 0
            result = self.runner(cmd, stdout=subprocess.PIPE)
        except FileNotFoundError as e:
            raise ClientNotFound(f"Install {cmd[0]}.") from e

        if result.returncode != 0:
            return False
        save_output(instance, result.stdout or b"", self.output_dir)
        return True

    def connect(self, instance: Instance, params: ConnectionParams) -> str:
        """Open a session, trying each login user in turn. Returns the user that worked."""
        if not (params.output or params.all):
            logger.info(f"{instance.name} {instance.instance_id} ({instance.instance_type}, {instance.region})")

        host, route_args = ssh_route(instance, self.config, params.use_jump_host)
        remote_args = prepare_args(params.args)

        for user in login_users(instance):
            cmd = build_ssh_command(
                user,
                host,
                route_args,
                remote_args,
                key=key_path(instance),
                connect_timeout=self.config.ssh_connect_timeout,
            )
            if self._attempt(instance, cmd, params.output):
                return user
            logger.debug(f"session as {user}@{host} failed")

        raise SessionError(f"could not open a session on {instance.name} ({host})")


def connect_to_compute(
    config: Configuration,
    params: ConnectionParams,
    finder: Optional[EC2Finder] = None,
    connector: Optional[DirectConnector] = None,
    **selector_kwargs,
) -> List[Outcome]:
    finder = finder or EC2Finder()
    connector = connector or DirectConnector(config)

    instances = discover(finder, config.regions, params.filter)
    return select_and_apply(
        instances,
        lambda instance: connector.connect(instance, params),
        columns=COLUMNS,
        row=instance_row,
        batch=params.output or params.all,
        describe=lambda instance: f"{instance.name} ({instance.instance_id})",
        **selector_kwargs,
    )
