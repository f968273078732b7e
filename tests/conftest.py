"""Shared fixtures: real code BoCs and a long description text."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Iterator

# Single 80-bit code cell.
LEGACY_CODE_BOC_HEX = "B5EE9C7241010101000C000014FF00F8008101008011A1EF0ED546"

# Three-cell code chain (root -> child -> leaf).
SCHEME_CODE_BOC_HEX = (
    "B5EE9C7241010301001A00010EFF00F80088FB04010114FF00F4A413F4BCF2C80B020002D393E0BA78"
)

SAMPLE_COMMIT_HEX = "4e97449a48c05600af00027d652519de61190b53"

WHISKERS_DESC = (
    "Once upon a time, in a cozy little house at the edge of a quiet village, there lived a "
    "curious kitten named Whiskers. Whiskers had soft gray fur, bright green eyes, and a tail "
    "that never stopped twitching whenever something interesting happened nearby.\n"
    "Every morning Whiskers woke up before everyone else and padded across the kitchen floor "
    "to sit by the window. From there the kitten watched sparrows hopping along the fence, "
    "leaves drifting down from the old oak tree, and the baker's cart rattling over the "
    "cobblestones on its way to market.\n"
    "One day a butterfly with wings the color of sunset landed on the windowsill. Whiskers "
    "pressed a tiny nose against the glass and the butterfly fluttered away toward the garden. "
    "Without a second thought, Whiskers slipped through the half-open door and followed.\n"
    "The garden was enormous to a kitten. Tall sunflowers swayed overhead, rows of lettuce "
    "looked like a green forest, and the pond at the far end shimmered like a mirror. The "
    "butterfly danced from flower to flower, always just out of reach, and Whiskers chased it "
    "past the beehives, under the wooden bench, and around the stone fountain.\n"
    "By the time the sun was high in the sky, Whiskers realized that the little house was "
    "nowhere in sight. The kitten sat down in the warm grass and mewed softly. A friendly old "
    "dog named Biscuit heard the sound and trotted over, sniffing curiously.\n"
    "Biscuit knew every path in the village. With a wag of the tail, the dog led Whiskers "
    "back along the garden wall, past the bakery where the smell of fresh bread filled the "
    "air, and all the way to the familiar blue door.\n"
    "That evening, curled up by the fireplace with a full belly and heavy eyelids, Whiskers "
    "dreamed of sunset-colored butterflies and of a kind old dog who always knew the way "
    "home. And from that day on, whenever Whiskers went exploring, Biscuit was never far "
    "behind.\n"
)


@pytest.fixture
def legacy_code_boc() -> bytes:
    return bytes.fromhex(LEGACY_CODE_BOC_HEX)


@pytest.fixture
def scheme_code_boc() -> bytes:
    return bytes.fromhex(SCHEME_CODE_BOC_HEX)


@pytest.fixture
def whiskers_desc() -> str:
    return WHISKERS_DESC


@pytest.fixture
def sample_commit() -> bytes:
    return bytes.fromhex(SAMPLE_COMMIT_HEX)


@pytest.fixture
def clean_tvc_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop ``TVC_*`` variables from the process environment for the test."""

    import os

    for name in list(os.environ):
        if name.startswith("TVC_"):
            monkeypatch.delenv(name)
    yield
