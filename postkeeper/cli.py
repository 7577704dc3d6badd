from __future__ import annotations

import argparse
import json
import sys
from typing import Callable, Sequence

from .config import load_config
from .errors import ConfigError, InvalidInputError, PostNotFoundError, StorageError
from .event_log import EventLogger
from .session import PostSession
from .shell import InteractiveShell

Handler = Callable[[PostSession, argparse.Namespace], int]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="postkeeper")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add(name: str, help_text: str, handler: Handler) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--config",
            default=None,
            help="Path to YAML config file (defaults are used when omitted).",
        )
        sub.set_defaults(_handler=handler)
        return sub

    add("shell", "Run the interactive post menu.", _cmd_shell)

    create = add("create", "Create a post and print its id.", _cmd_create)
    create.add_argument("content", help="Post text.")

    comment = add("comment", "Add a comment to a post.", _cmd_comment)
    comment.add_argument("post_id", type=int)
    comment.add_argument("text", help="Comment text.")

    like = add("like", "Like a post.", _cmd_like)
    like.add_argument("post_id", type=int)

    dislike = add("dislike", "Dislike a post.", _cmd_dislike)
    dislike.add_argument("post_id", type=int)

    share = add("share", "Print the share link for a post.", _cmd_share)
    share.add_argument("post_id", type=int)

    add("list", "List all posts in creation order.", _cmd_list)

    show = add("show", "Show a post with its comments.", _cmd_show)
    show.add_argument("post_id", type=int)

    delete = add("delete", "Delete a post and its comments.", _cmd_delete)
    delete.add_argument("post_id", type=int)

    return parser


def _eprint(message: str) -> None:
    print(message, file=sys.stderr)


def _quote(value: object) -> str:
    # One value per line: embedded newlines must not break key=value output.
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def _cmd_shell(session: PostSession, args: argparse.Namespace) -> int:
    return InteractiveShell(session, stdin=sys.stdin, stdout=sys.stdout).run()


def _cmd_create(session: PostSession, args: argparse.Namespace) -> int:
    print(f"post_id={session.create_post(args.content)}")
    return 0


def _cmd_comment(session: PostSession, args: argparse.Namespace) -> int:
    sequence = session.add_comment(args.post_id, args.text)
    print(f"post_id={args.post_id}")
    print(f"sequence={sequence}")
    return 0


def _cmd_like(session: PostSession, args: argparse.Namespace) -> int:
    likes = session.like(args.post_id)
    print(f"post_id={args.post_id}")
    print(f"likes={likes}")
    return 0


def _cmd_dislike(session: PostSession, args: argparse.Namespace) -> int:
    dislikes = session.dislike(args.post_id)
    print(f"post_id={args.post_id}")
    print(f"dislikes={dislikes}")
    return 0


def _cmd_share(session: PostSession, args: argparse.Namespace) -> int:
    print(f"share_link={session.get_share_link(args.post_id)}")
    return 0


def _cmd_list(session: PostSession, args: argparse.Namespace) -> int:
    posts = session.list_posts()
    print(f"post_count={len(posts)}")
    for summary in posts:
        fields = {
            "content": summary.content,
            "comment_count": summary.comment_count,
            "likes": summary.likes,
            "dislikes": summary.dislikes,
        }
        print(f"post[{summary.id}]={_quote(fields)}")
    return 0


def _cmd_show(session: PostSession, args: argparse.Namespace) -> int:
    post = session.get_post(args.post_id)
    print(f"post_id={post.id}")
    print(f"content={_quote(post.content)}")
    print(f"likes={post.likes}")
    print(f"dislikes={post.dislikes}")
    print(f"comment_count={len(post.comments)}")
    for comment in post.comments:
        print(f"comment[{comment.sequence}]={_quote(comment.text)}")
    return 0


def _cmd_delete(session: PostSession, args: argparse.Namespace) -> int:
    session.delete_post(args.post_id)
    print(f"deleted={args.post_id}")
    return 0


def _run_command(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    handler: Handler = getattr(args, "_handler")

    log = EventLogger(cfg.log.path if cfg.log.enabled else None)
    with log:
        log.note("command_started", command=args.command)

        try:
            with PostSession.open(cfg, logger=log) as session:
                code = int(handler(session, args))
        except (InvalidInputError, PostNotFoundError):
            raise
        except Exception as e:
            log.failed("command_failed", e, command=args.command)
            raise

        log.note("command_completed", command=args.command, exit_code=code)
        return code


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        return _run_command(args)
    except ConfigError as e:
        _eprint(str(e))
        return 2
    except StorageError as e:
        _eprint(str(e))
        return 3
    except PostNotFoundError as e:
        _eprint(str(e))
        return 4
    except InvalidInputError as e:
        _eprint(f"Invalid input: {e}")
        return 5
    except KeyboardInterrupt:
        _eprint("Interrupted")
        return 130
    except Exception as e:
        _eprint(f"Unexpected error: {e}")
        return 1
