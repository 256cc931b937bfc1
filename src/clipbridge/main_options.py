"""Click option helpers for choosing the run mode."""
import click

RELAY_MODE = "relay"
PEER_MODE = "peer"


class ModeOption(click.Option):
    """Flag option that cannot be combined with the flags named in excludes."""

    def __init__(self, *args, **kwargs):
        """Initialize with the excludes parameter listing rival flags."""
        self.excludes = kwargs.pop("excludes", [])
        super().__init__(*args, **kwargs)

    def handle_parse_result(self, ctx, opts, args):
        """Reject the command line if a rival flag was also given."""
        if opts.get(self.name):
            for other in self.excludes:
                if opts.get(other):
                    raise click.UsageError(
                        f"Options --{self.name} and --{other} are mutually exclusive"
                    )
        return super().handle_parse_result(ctx, opts, args)


def resolve_mode(relay: bool, peer: bool) -> str:
    """Return the selected mode name.

    Args:
        relay: Value of the --relay flag.
        peer: Value of the --peer flag.

    Raises:
        click.UsageError: If neither flag was given.
    """
    if relay:
        return RELAY_MODE
    if peer:
        return PEER_MODE
    raise click.UsageError("Either --relay or --peer must be specified")
