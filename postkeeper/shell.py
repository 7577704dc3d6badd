from __future__ import annotations

from typing import TextIO

from .errors import InvalidInputError, PostNotFoundError, StorageError
from .models import PostSummary
from .session import PostSession

MENU = """
Select an action:
1. Create a Post
2. Add Comment to a Post
3. Like a Post
4. Dislike a Post
5. Share a Post
6. Display All Posts
7. Delete a Post
8. Exit"""

EXIT_CHOICE = 8


class _EndOfInput(Exception):
    pass


def format_summary(post: PostSummary) -> str:
    return (
        f"[{post.id}] {post.content} "
        f"(comments={post.comment_count}, likes={post.likes}, dislikes={post.dislikes})"
    )


class InteractiveShell:
    """
    Numbered menu loop over a PostSession.

    Store and archive failures are printed and the menu is shown again; only
    choice 8 or end of input leaves the loop.
    """

    def __init__(self, session: PostSession, *, stdin: TextIO, stdout: TextIO) -> None:
        self._session = session
        self._in = stdin
        self._out = stdout

    def run(self) -> int:
        while True:
            self._print(MENU)
            try:
                choice = self._parse_int(self._prompt("Enter your choice: "))
                if choice == EXIT_CHOICE:
                    return 0
                self._dispatch(choice)
            except _EndOfInput:
                self._print("")
                return 0
            except (InvalidInputError, PostNotFoundError) as e:
                self._print(str(e))
            except StorageError as e:
                self._print(f"Change not saved: {e}")

    def _dispatch(self, choice: int | None) -> None:
        s = self._session

        if choice == 1:
            content = self._prompt("Enter post content: ")
            self._print(f"Post created with ID: {s.create_post(content)}")
        elif choice == 2:
            post_id = self._ask_post_id("Enter post ID to comment on: ")
            if post_id is None:
                return
            text = self._prompt("Enter your comment: ")
            sequence = s.add_comment(post_id, text)
            self._print(f"Comment #{sequence} added to post {post_id}.")
        elif choice == 3:
            post_id = self._ask_post_id("Enter post ID to like: ")
            if post_id is not None:
                self._print(f"Post {post_id} now has {s.like(post_id)} like(s).")
        elif choice == 4:
            post_id = self._ask_post_id("Enter post ID to dislike: ")
            if post_id is not None:
                self._print(f"Post {post_id} now has {s.dislike(post_id)} dislike(s).")
        elif choice == 5:
            post_id = self._ask_post_id("Enter post ID to share: ")
            if post_id is not None:
                self._print(f"Sharing post: {s.get_share_link(post_id)}")
        elif choice == 6:
            self._display_posts()
        elif choice == 7:
            post_id = self._ask_post_id("Enter post ID to delete: ")
            if post_id is not None:
                s.delete_post(post_id)
                self._print(f"Post with ID {post_id} has been deleted.")
        else:
            self._print("Invalid choice. Please try again.")

    def _display_posts(self) -> None:
        posts = self._session.list_posts()
        if not posts:
            self._print("No posts yet.")
            return

        for summary in posts:
            self._print(format_summary(summary))
            for comment in self._session.get_post(summary.id).comments:
                self._print(f"    {comment.sequence}: {comment.text}")

    def _ask_post_id(self, prompt: str) -> int | None:
        post_id = self._parse_int(self._prompt(prompt))
        if post_id is None:
            self._print("Invalid post ID.")
        return post_id

    def _prompt(self, text: str) -> str:
        self._out.write(text)
        self._out.flush()
        line = self._in.readline()
        if line == "":
            raise _EndOfInput()
        return line.strip()

    def _print(self, text: str) -> None:
        self._out.write(text + "\n")

    @staticmethod
    def _parse_int(value: str) -> int | None:
        try:
            return int(value)
        except ValueError:
            return None
