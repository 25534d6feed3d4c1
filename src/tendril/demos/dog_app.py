"""Dog breed browser.

Picks a breed from a list fetched once at startup and shows a random
picture URL for it. The list resource reads no signals, so it never
restarts on its own. The picture resource reads ``breed`` before its first
await, so selecting another breed supersedes the running fetch.
"""

from __future__ import annotations

import logging

from textual.app import App, ComposeResult
from textual.containers import Vertical, VerticalScroll
from textual.widgets import Button, Footer, Header, Static

from tendril import textual as ttx
from tendril.demos.dogs import fetch_breed_image, fetch_breeds, take_breeds
from tendril.resource import Failed, Pending, Ready, Resource
from tendril.signal import Signal

logger = logging.getLogger("tendril.demos.dog_app")


class DogApp(App):
    """Select a breed, see a dog."""

    TITLE = "Dogs"
    CSS = """
    #title { padding: 1 2; text-style: bold; }
    #picture { height: auto; padding: 0 2; }
    #refetch { margin-bottom: 1; }
    #breeds { width: 40; padding: 0 2; }
    .breed { width: 100%; }
    """
    BINDINGS = [("r", "refetch", "Another doggo")]

    def __init__(self, breed: str = "shiba") -> None:
        super().__init__()
        self.breed: Signal[str] = Signal(breed)
        self.breed_list: Resource[dict[str, list[str]]] | None = None
        self.image: Resource[str] | None = None
        self._renderers: list = []

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="title", markup=False)
        with Vertical(id="picture"):
            yield Button("Click to fetch another doggo", id="refetch")
            yield Static("loading image...", id="image", markup=False)
        yield Static("loading breeds...", id="status")
        yield VerticalScroll(id="breeds")
        yield Footer()

    def on_ready(self) -> None:
        self.breed_list = Resource(self._load_breeds)
        self.image = Resource(self._load_image)
        self._renderers = [
            ttx.effect(self, self._render_title),
            ttx.effect(self, self._render_image),
            ttx.effect(self, self._render_breeds),
        ]
        logger.info("Dog app ready, showing %s", self.breed.get_untracked())

    def on_unmount(self) -> None:
        for e in self._renderers:
            e.dispose()
        for res in (self.image, self.breed_list):
            if res is not None:
                res.dispose()

    # --- Computations ---

    async def _load_breeds(self, ctx) -> dict[str, list[str]]:
        return take_breeds(await fetch_breeds())

    async def _load_image(self, ctx) -> str:
        breed = ctx.read(self.breed)
        return await fetch_breed_image(breed)

    # --- Rendering ---

    def _render_title(self, ctx) -> None:
        breed = ctx.read(self.breed)
        self.query_one("#title", Static).update(f"Select a dog breed: {breed}")

    def _render_image(self, ctx) -> None:
        state = self.image.read(ctx)
        picture = self.query_one("#image", Static)
        match state:
            case Ready(value=url):
                picture.update(url)
            case Failed():
                picture.update("loading image failed")
            case Pending():
                picture.update("loading image...")

    def _render_breeds(self, ctx) -> None:
        state = self.breed_list.read(ctx)
        status = self.query_one("#status", Static)
        match state:
            case Ready(value=breeds):
                status.update(f"{len(breeds)} breeds")
                container = self.query_one("#breeds", VerticalScroll)
                container.remove_children()
                container.mount_all(Button(name, name=name, classes="breed") for name in breeds)
            case Failed():
                status.update("error fetching breeds")
            case Pending():
                status.update("loading breeds...")

    # --- Input ---

    def select_breed(self, name: str) -> None:
        logger.info("Selected breed %s", name)
        self.breed.write(name)

    def action_refetch(self) -> None:
        if self.image is not None:
            self.image.restart()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "refetch":
            self.action_refetch()
        elif event.button.name:
            self.select_breed(event.button.name)


def main() -> None:
    DogApp().run()


if __name__ == "__main__":
    main()
