"""
Animation

Per-joint keyframe tracks produced by the importer.
"""

import bisect
from enum import Enum
from typing import List, Optional

import numpy as np
from pyrr import Quaternion, Vector3

from ..errors import UnsupportedChannel, ValidationFailure


class InterpolationType(Enum):
    """Animation interpolation types."""
    LINEAR = "LINEAR"
    STEP = "STEP"
    CUBICSPLINE = "CUBICSPLINE"

    @classmethod
    def parse(cls, value: Optional[str]) -> 'InterpolationType':
        """Map a glTF sampler interpolation string, None meaning the glTF default."""
        if value is None:
            return cls.LINEAR
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedChannel(f"Invalid or unknown interpolation type '{value}'") from None


class AnimationTarget(Enum):
    """Animation target properties."""
    TRANSLATION = "translation"
    ROTATION = "rotation"
    SCALE = "scale"

    @classmethod
    def parse(cls, value: Optional[str]) -> 'AnimationTarget':
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedChannel(f"Invalid or unknown channel target path '{value}'") from None

    @property
    def width(self) -> int:
        """Number of float components of a value for this property."""
        return 4 if self is AnimationTarget.ROTATION else 3

    def make_value(self, data):
        """Copy raw components into the pyrr type used for this property."""
        data = np.array(data)
        if self is AnimationTarget.ROTATION:
            return Quaternion(data)
        return Vector3(data)


class Keyframe:
    """
    Single keyframe in an animation.

    Stores time and value for a specific property.
    """

    def __init__(self, time: float, value):
        """
        Initialize keyframe.

        Args:
            time: Time in seconds
            value: Value at this time (Vector3 for T/S, Quaternion for R)
        """
        self.time = time
        self.value = value

    def __repr__(self):
        return f"Keyframe(t={self.time:.6f}, v={list(self.value)})"


class Track:
    """
    Time-ordered keyframes for one property of one joint.
    """

    def __init__(self, target: AnimationTarget):
        self.target = target
        self.keyframes: List[Keyframe] = []

    def add_keyframe(self, time: float, value):
        """Append a keyframe to this track."""
        self.keyframes.append(Keyframe(time, value))

    @property
    def times(self) -> List[float]:
        return [kf.time for kf in self.keyframes]

    def __len__(self):
        return len(self.keyframes)

    def __iter__(self):
        return iter(self.keyframes)

    def __getitem__(self, index) -> Keyframe:
        return self.keyframes[index]

    def sample(self, time: float):
        """
        Sample the track at a given time.

        Keys are interpolated linearly, rotations with a normalized lerp.

        Args:
            time: Time in seconds

        Returns:
            Interpolated value at this time
        """
        if not self.keyframes:
            return None

        # Clamp time to track range
        if time <= self.keyframes[0].time:
            return self.keyframes[0].value
        if time >= self.keyframes[-1].time:
            return self.keyframes[-1].value

        index = bisect.bisect_right(self.times, time)
        k0 = self.keyframes[index - 1]
        k1 = self.keyframes[index]
        return self._interpolate(k0, k1, time)

    def _interpolate(self, k0: Keyframe, k1: Keyframe, time: float):
        t = (time - k0.time) / (k1.time - k0.time)
        v0 = np.asarray(k0.value, dtype='f8')
        v1 = np.asarray(k1.value, dtype='f8')

        if self.target is AnimationTarget.ROTATION:
            # Shortest path
            if np.dot(v0, v1) < 0.0:
                v1 = -v1
            value = v0 * (1.0 - t) + v1 * t
            return Quaternion(value / np.linalg.norm(value))

        return Vector3(v0 * (1.0 - t) + v1 * t)

    def validate(self, duration: float):
        """
        Raises:
            ValidationFailure: keys are out of [0, duration], not strictly
                increasing or hold non-finite values
        """
        previous = None
        for keyframe in self.keyframes:
            if not np.all(np.isfinite(np.asarray(keyframe.value, dtype='f8'))):
                raise ValidationFailure(
                    f"{self.target.value} key at {keyframe.time} has a non-finite value"
                )
            if keyframe.time < 0.0 or keyframe.time > duration:
                raise ValidationFailure(
                    f"{self.target.value} key at {keyframe.time} is outside [0, {duration}]"
                )
            if previous is not None and keyframe.time <= previous:
                raise ValidationFailure(
                    f"{self.target.value} key times are not strictly increasing "
                    f"({previous} then {keyframe.time})"
                )
            previous = keyframe.time

    def __repr__(self):
        return f"Track(property={self.target.value}, keyframes={len(self.keyframes)})"


class JointTrack:
    """
    Translation, rotation and scale tracks of one joint.
    """

    def __init__(self):
        self.translations = Track(AnimationTarget.TRANSLATION)
        self.rotations = Track(AnimationTarget.ROTATION)
        self.scales = Track(AnimationTarget.SCALE)

    def track_for(self, target: AnimationTarget) -> Track:
        if target is AnimationTarget.TRANSLATION:
            return self.translations
        if target is AnimationTarget.ROTATION:
            return self.rotations
        return self.scales

    def __iter__(self):
        return iter((self.translations, self.rotations, self.scales))

    def __repr__(self):
        return (f"JointTrack(t={len(self.translations)}, r={len(self.rotations)}, "
                f"s={len(self.scales)})")


class Animation:
    """
    Complete animation, one JointTrack per skeleton joint.
    """

    def __init__(self, name: str):
        """
        Initialize animation.

        Args:
            name: Animation name
        """
        self.name = name
        self.tracks: List[JointTrack] = []
        self.duration: float = 0.0  # Longest channel span

    def validate(self, num_joints: Optional[int] = None):
        """
        Check duration and every track.

        Args:
            num_joints: Expected number of tracks, when known

        Raises:
            ValidationFailure: the animation cannot be used as is
        """
        if self.duration < 0.0:
            raise ValidationFailure(f"Animation '{self.name}' has a negative duration")
        if num_joints is not None and len(self.tracks) != num_joints:
            raise ValidationFailure(
                f"Animation '{self.name}' has {len(self.tracks)} tracks for {num_joints} joints"
            )
        for joint_track in self.tracks:
            for track in joint_track:
                if not track.keyframes:
                    raise ValidationFailure(
                        f"Animation '{self.name}' has an empty {track.target.value} track"
                    )
                track.validate(self.duration)

    def sample_all(self, time: float) -> List[tuple]:
        """
        Sample every joint at a given time.

        Returns:
            (translation, rotation, scale) per joint, in track order
        """
        return [
            (jt.translations.sample(time), jt.rotations.sample(time), jt.scales.sample(time))
            for jt in self.tracks
        ]

    def __repr__(self):
        return f"Animation(name='{self.name}', duration={self.duration:.2f}s, tracks={len(self.tracks)})"
