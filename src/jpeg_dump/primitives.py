from dataclasses import dataclass, field
from enum import IntEnum, unique
from typing import List


@unique
class JpegMarker(IntEnum):
    START_OF_IMAGE = 0xD8  # SOI
    END_OF_IMAGE = 0xD9  # EOI
    START_OF_SCAN = 0xDA  # SOS
    DEFINE_RESTART_INTERVAL = 0xDD  # DRI
    START_OF_FRAME_JPEGLS = 0xF7  # SOF_55: start of a JPEG-LS encoded frame
    JPEGLS_EXTENDED_PARAMETERS = 0xF8  # LSE
    APPLICATION_DATA0 = 0xE0  # APP0: JFIF header
    APPLICATION_DATA7 = 0xE7  # APP7: color space
    APPLICATION_DATA8 = 0xE8  # APP8: colorXForm
    APPLICATION_DATA14 = 0xEE  # APP14: Adobe
    COMMENT = 0xFE  # COM
    RESTART_MARKER0 = 0xD0  # RST0
    RESTART_MARKER1 = 0xD1
    RESTART_MARKER2 = 0xD2
    RESTART_MARKER3 = 0xD3
    RESTART_MARKER4 = 0xD4
    RESTART_MARKER5 = 0xD5
    RESTART_MARKER6 = 0xD6
    RESTART_MARKER7 = 0xD7  # RST7


@unique
class InterleaveMode(IntEnum):
    NONE = 0
    LINE = 1
    SAMPLE = 2


INTERLEAVE_MODE_NAMES = {
    InterleaveMode.NONE: "None",
    InterleaveMode.LINE: "Line interleaved",
    InterleaveMode.SAMPLE: "Sample interleaved",
}

# LSE id for preset coding parameters (ITU T.87, C.2.4.1.1)
PRESET_CODING_PARAMETERS_ID = 1


def interleave_mode_name(interleave_mode: int) -> str:
    return INTERLEAVE_MODE_NAMES.get(interleave_mode, "Unknown")


@dataclass
class FrameComponent:
    identifier: int = 0
    sampling_factor: int = 0
    quantization_table: int = 0

    @property
    def horizontal_sampling(self) -> int:
        return self.sampling_factor >> 4

    @property
    def vertical_sampling(self) -> int:
        return self.sampling_factor & 0x0F


@dataclass
class FrameHeader:
    size: int = 0
    precision: int = 0
    lines: int = 0
    samples_per_line: int = 0
    components: List[FrameComponent] = field(default_factory=list)


@dataclass
class ScanComponent:
    identifier: int = 0
    mapping_table_selector: int = 0


@dataclass
class ScanHeader:
    size: int = 0
    components: List[ScanComponent] = field(default_factory=list)
    near_lossless: int = 0
    interleave_mode: int = 0
    point_transform: int = 0


@dataclass
class PresetCodingParameters:
    size: int = 0
    id: int = 0
    maximum_sample_value: int = 0
    threshold1: int = 0
    threshold2: int = 0
    threshold3: int = 0
    reset_value: int = 0


@dataclass
class RestartInterval:
    size: int = 0
    interval: int = 0


@dataclass
class ApplicationData:
    marker_code: int = 0
    size: int = 0


@dataclass
class Comment:
    size: int = 0
    text: str = ""
