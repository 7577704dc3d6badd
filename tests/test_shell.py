from __future__ import annotations

import io
import unittest

from postkeeper.errors import StorageError
from postkeeper.models import StoreSnapshot
from postkeeper.session import PostSession
from postkeeper.shell import InteractiveShell
from postkeeper.share_link import ShareLinkBuilder
from postkeeper.storage import SQLitePostArchive
from postkeeper.store import PostStore


class _FullDiskArchive(SQLitePostArchive):
    def save(self, snapshot: StoreSnapshot) -> None:
        raise StorageError("disk full")


def _run(lines: list[str], session: PostSession | None = None) -> tuple[int, str, PostSession]:
    s = session or PostSession(PostStore(share_links=ShareLinkBuilder(fingerprint_chars=0)))
    stdin = io.StringIO("".join(line + "\n" for line in lines))
    stdout = io.StringIO()
    code = InteractiveShell(s, stdin=stdin, stdout=stdout).run()
    return code, stdout.getvalue(), s


class TestInteractiveShell(unittest.TestCase):
    def test_full_menu_walkthrough(self) -> None:
        code, out, session = _run(
            [
                "1", "hello world",
                "2", "1", "nice",
                "3", "1",
                "3", "1",
                "4", "1",
                "5", "1",
                "6",
                "8",
            ]
        )

        self.assertEqual(code, 0)
        self.assertIn("Post created with ID: 1", out)
        self.assertIn("Comment #0 added to post 1.", out)
        self.assertIn("Post 1 now has 2 like(s).", out)
        self.assertIn("Post 1 now has 1 dislike(s).", out)
        self.assertIn("Sharing post: http://myapp.com/post/1", out)
        self.assertIn("[1] hello world (comments=1, likes=2, dislikes=1)", out)
        self.assertIn("    0: nice", out)

        post = session.get_post(1)
        self.assertEqual(post.likes, 2)

    def test_errors_are_reported_and_loop_continues(self) -> None:
        code, out, session = _run(
            [
                "1", "   ",
                "3", "42",
                "7", "abc",
                "9",
                "x",
                "1", "kept",
                "8",
            ]
        )

        self.assertEqual(code, 0)
        self.assertIn("content must be non-empty", out)
        self.assertIn("Post with ID 42 does not exist.", out)
        self.assertIn("Invalid post ID.", out)
        self.assertEqual(out.count("Invalid choice. Please try again."), 2)
        self.assertEqual([p.content for p in session.list_posts()], ["kept"])

    def test_delete_then_display(self) -> None:
        code, out, session = _run(["1", "a", "1", "b", "7", "1", "6", "8"])

        self.assertEqual(code, 0)
        self.assertIn("Post with ID 1 has been deleted.", out)
        self.assertNotIn("[1] a", out)
        self.assertIn("[2] b", out)

    def test_empty_store_display(self) -> None:
        _, out, _ = _run(["6", "8"])
        self.assertIn("No posts yet.", out)

    def test_failed_save_is_reported_and_not_kept(self) -> None:
        with _FullDiskArchive.open(":memory:") as archive:
            session = PostSession(PostStore(), archive=archive)
            code, out, _ = _run(["1", "hello", "6", "8"], session)

        self.assertEqual(code, 0)
        self.assertIn("Change not saved: disk full", out)
        self.assertIn("No posts yet.", out)
        self.assertEqual(session.list_posts(), [])

    def test_end_of_input_exits_cleanly(self) -> None:
        code, out, _ = _run(["1"])
        self.assertEqual(code, 0)
        self.assertIn("Enter post content: ", out)


if __name__ == "__main__":
    unittest.main()
