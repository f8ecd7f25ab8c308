"""Video player controls as a reducer over immutable state.

Media-element events (metadata loaded, time update, play, pause) and
user controls are both events. ``reduce`` maps (state, event) to the
next state plus the effects the shell has to carry out: commands for
the media element, and the one view-count increment per page view.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable

logger = logging.getLogger(__name__)

PLAYBACK_SPEEDS: tuple[float, ...] = (0.25, 0.5, 0.75, 1.0, 1.25, 1.5, 1.75, 2.0)


def format_time(seconds: float) -> str:
    """Render seconds as m:ss."""
    minutes, secs = divmod(int(max(seconds, 0)), 60)
    return f"{minutes}:{secs:02d}"


@dataclass(frozen=True)
class PlayerState:
    """Local, per-page player state. Never persisted or shared."""

    playing: bool = False
    position: float = 0.0
    duration: float = 0.0
    volume: float = 1.0
    volume_slider_visible: bool = False
    fullscreen: bool = False
    speed: float = 1.0
    loop: bool = False
    settings_open: bool = False
    view_counted: bool = False

    @property
    def muted(self) -> bool:
        return self.volume == 0

    @property
    def seek_max(self) -> float:
        """Upper bound of the seek bar; 100 until metadata is known."""
        return self.duration or 100.0

    @property
    def time_label(self) -> str:
        return f"{format_time(self.position)} / {format_time(self.duration)}"


# Media element events


@dataclass(frozen=True)
class MetadataLoaded:
    duration: float


@dataclass(frozen=True)
class TimeUpdate:
    position: float


@dataclass(frozen=True)
class Played:
    pass


@dataclass(frozen=True)
class Paused:
    pass


# User controls


@dataclass(frozen=True)
class TogglePlay:
    pass


@dataclass(frozen=True)
class Seek:
    position: float


@dataclass(frozen=True)
class SetVolume:
    volume: float


@dataclass(frozen=True)
class ShowVolumeSlider:
    pass


@dataclass(frozen=True)
class HideVolumeSlider:
    pass


@dataclass(frozen=True)
class SetSpeed:
    speed: float


@dataclass(frozen=True)
class ToggleLoop:
    pass


@dataclass(frozen=True)
class ToggleSettings:
    pass


@dataclass(frozen=True)
class ToggleFullscreen:
    pass


@dataclass(frozen=True)
class FullscreenChanged:
    active: bool


Event = (
    MetadataLoaded | TimeUpdate | Played | Paused | TogglePlay | Seek | SetVolume
    | ShowVolumeSlider | HideVolumeSlider | SetSpeed | ToggleLoop | ToggleSettings
    | ToggleFullscreen | FullscreenChanged
)


@dataclass(frozen=True)
class Effect:
    """Something the shell must do after a transition.

    Kinds: "play", "pause", "seek", "volume", "speed", "loop",
    "request_fullscreen", "exit_fullscreen", "increment_views".
    """

    kind: str
    value: float | bool | None = None


def reduce(state: PlayerState, event: Event) -> tuple[PlayerState, list[Effect]]:
    """Advance the player by one event.

    Raises:
        ValueError: For a speed outside PLAYBACK_SPEEDS or an unknown event.
    """
    if isinstance(event, MetadataLoaded):
        return replace(state, duration=event.duration), []

    if isinstance(event, TimeUpdate):
        return replace(state, position=event.position), []

    if isinstance(event, Played):
        if state.view_counted:
            return replace(state, playing=True), []
        return replace(state, playing=True, view_counted=True), [Effect("increment_views")]

    if isinstance(event, Paused):
        return replace(state, playing=False), []

    if isinstance(event, TogglePlay):
        effect = Effect("pause") if state.playing else Effect("play")
        return replace(state, playing=not state.playing), [effect]

    if isinstance(event, Seek):
        position = min(max(event.position, 0.0), state.seek_max)
        return replace(state, position=position), [Effect("seek", position)]

    if isinstance(event, SetVolume):
        volume = min(max(event.volume, 0.0), 1.0)
        return replace(state, volume=volume), [Effect("volume", volume)]

    if isinstance(event, ShowVolumeSlider):
        return replace(state, volume_slider_visible=True), []

    if isinstance(event, HideVolumeSlider):
        return replace(state, volume_slider_visible=False), []

    if isinstance(event, SetSpeed):
        if event.speed not in PLAYBACK_SPEEDS:
            raise ValueError(f"Unsupported playback speed: {event.speed}")
        return replace(state, speed=event.speed), [Effect("speed", event.speed)]

    if isinstance(event, ToggleLoop):
        return replace(state, loop=not state.loop), [Effect("loop", not state.loop)]

    if isinstance(event, ToggleSettings):
        return replace(state, settings_open=not state.settings_open), []

    if isinstance(event, ToggleFullscreen):
        # the flag itself follows FullscreenChanged from the document
        kind = "exit_fullscreen" if state.fullscreen else "request_fullscreen"
        return state, [Effect(kind)]

    if isinstance(event, FullscreenChanged):
        return replace(state, fullscreen=event.active), []

    raise ValueError(f"Unknown player event: {event!r}")


class PlayerView:
    """Player for one page view of one video.

    Holds the current state, runs events through ``reduce`` and carries
    out effects: IncrementViews goes to ``increment_views``, everything
    else to the optional ``media`` callback (the media element binding).
    """

    def __init__(
        self,
        video_id: str,
        increment_views: Callable[[str], None],
        media: Callable[[Effect], None] | None = None,
    ) -> None:
        self.video_id = video_id
        self.state = PlayerState()
        self._increment_views = increment_views
        self._media = media

    def dispatch(self, event: Event) -> PlayerState:
        self.state, effects = reduce(self.state, event)
        for effect in effects:
            if effect.kind == "increment_views":
                logger.info("Counting view: %s", self.video_id)
                self._increment_views(self.video_id)
            elif self._media is not None:
                self._media(effect)
        return self.state
