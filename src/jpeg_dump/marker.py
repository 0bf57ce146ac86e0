# --------------------------------------------------------------------------
# |segment name|marker value|payload             |defined in                |
# --------------------------------------------------------------------------
# |SOI         |0xFFD8      |none                |ITU T.81                  |
# |EOI         |0xFFD9      |none                |ITU T.81                  |
# |SOS         |0xFFDA      |scan header         |ITU T.81 (T.87 fields)    |
# |DRI         |0xFFDD      |restart interval    |ITU T.81 / T.87           |
# |RSTm        |0xFFD0-D7   |none                |ITU T.81                  |
# |SOF55       |0xFFF7      |JPEG-LS frame header|ITU T.87                  |
# |LSE         |0xFFF8      |extended parameters |ITU T.87                  |
# |APPn        |0xFFEn      |application data    |ITU T.81                  |
# |COM         |0xFFFE      |comment text        |ITU T.81                  |
# --------------------------------------------------------------------------
# Every segment with a payload starts with a 2 byte size that counts itself.
# Inside a JPEG-LS scan the encoder keeps the bit after 0xFF clear, so only a
# byte with the high bit set can follow 0xFF as a marker code.
from __future__ import annotations
import logging
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Union

from .primitives import (
    JpegMarker,
    FrameHeader,
    FrameComponent,
    ScanHeader,
    ScanComponent,
    PresetCodingParameters,
    RestartInterval,
    ApplicationData,
    Comment,
    PRESET_CODING_PARAMETERS_ID,
    interleave_mode_name,
)
from .reader import ByteSource

logger = logging.getLogger(__name__)

MARKER_PREFIX = 0xFF

ITU_T81 = "ITU T.81/IEC 10918-1"
ITU_T87 = "ITU T.87/IEC 14495-1 JPEG LS"

FIELD_INDENT = "  "
COMPONENT_INDENT = "    "

APPLICATION_DATA_NAMES = {
    JpegMarker.APPLICATION_DATA0: "APP0 (Application Data 0), JFIF header",
    JpegMarker.APPLICATION_DATA7: "APP7 (Application Data 7), color space",
    JpegMarker.APPLICATION_DATA8: "APP8 (Application Data 8), colorXForm",
    JpegMarker.APPLICATION_DATA14: "APP14 (Application Data 14), Adobe",
}

OutputSink = Callable[[str], None]


def marker_info(marker: int) -> str:
    """Short name of a marker code, used by log messages."""
    try:
        return JpegMarker(marker).name
    except ValueError:
        return "Unknown Marker"


class MarkerScanner:
    """
    Single-pass dumper of the marker segments in a JPEG / JPEG-LS stream.

    Each recognized marker is printed as a header line followed by one line
    per decoded field. Every line starts with the byte offset at which the
    marker (its 0xFF prefix) or the field begins.

    Args:
        f: Binary stream positioned at the start of the JPEG data
        output: Callable receiving each formatted line (print by default)
        strict: Raise TruncatedSegmentError on a truncated segment instead of
            reading the missing bytes as zero
    """

    def __init__(self, f: BinaryIO, output: OutputSink = print, strict: bool = False):
        self.source = ByteSource(f, strict=strict)
        self.output = output
        self.jpegls_stream = False

    @property
    def position(self) -> int:
        return self.source.position

    @property
    def start_offset(self) -> int:
        # offset of the 0xFF prefix, the marker code byte has just been read
        return self.position - 2

    def scan(self) -> None:
        while True:
            byte = self.source.read_byte()
            if byte is None:
                break  # End of stream

            if byte != MARKER_PREFIX:
                continue  # Not a marker start

            marker_code = self.source.read_byte()
            if marker_code is None:
                break  # End of stream

            if self.is_marker_code(marker_code):
                self.dispatch(marker_code)
            else:
                logger.debug("Skipping encoded data 0xFF%02X at offset %d", marker_code, self.start_offset)

    def is_marker_code(self, marker_code: int) -> bool:
        # Encoders prevent marker codes in the encoded bit stream by stuffing
        # a zero byte (JPEG) or a zero bit (JPEG-LS) after 0xFF.
        if self.jpegls_stream:
            return (marker_code & 0x80) == 0x80
        return marker_code != 0x00

    def dispatch(self, marker_code: int):
        """Print the segment of marker_code and return its decoded view, if it has one."""
        dump_function = DUMP_FUNCTIONS.get(marker_code)
        if dump_function is None:
            return dump_unknown_marker(self, marker_code)
        return dump_function(self, marker_code)

    def print_header(self, marker_code: int, description: str) -> None:
        self.output(f"{self.start_offset:8} Marker 0xFF{marker_code:02X}: {description}")

    def print_field(self, position: int, description: str, value, indent: str = FIELD_INDENT) -> None:
        self.output(f"{position:8} {indent}{description} = {value}")

    def read_u8_field(self, description: str, indent: str = FIELD_INDENT) -> int:
        position = self.position
        value = self.source.read_u8()
        self.print_field(position, description, value, indent)
        return value

    def read_u16_field(self, description: str, indent: str = FIELD_INDENT) -> int:
        position = self.position
        value = self.source.read_u16()
        self.print_field(position, description, value, indent)
        return value


def dump_start_of_image(scanner: MarkerScanner, marker_code: int) -> None:
    scanner.print_header(marker_code, f"SOI (Start Of Image), defined in {ITU_T81}")


def dump_end_of_image(scanner: MarkerScanner, marker_code: int) -> None:
    scanner.print_header(marker_code, f"EOI (End Of Image), defined in {ITU_T81}")


def dump_start_of_frame_jpegls(scanner: MarkerScanner, marker_code: int) -> FrameHeader:
    """Print the SOF_55 frame header and switch the scanner to JPEG-LS stream mode."""
    scanner.print_header(marker_code, f"SOF_55 (Start Of Frame JPEG-LS), defined in {ITU_T87}")
    frame = FrameHeader()
    frame.size = scanner.read_u16_field("Size")
    frame.precision = scanner.read_u8_field("Sample precision (P)")
    frame.lines = scanner.read_u16_field("Number of lines (Y)")
    frame.samples_per_line = scanner.read_u16_field("Number of samples per line (X)")
    component_count = scanner.read_u8_field("Number of image components in a frame (Nf)")

    for _ in range(component_count):
        component = FrameComponent()
        component.identifier = scanner.read_u8_field("Component identifier (Ci)", COMPONENT_INDENT)
        position = scanner.position
        component.sampling_factor = scanner.source.read_u8()
        scanner.print_field(
            position,
            "H and V sampling factor (Hi + Vi)",
            f"{component.sampling_factor} ({component.horizontal_sampling} + {component.vertical_sampling})",
            COMPONENT_INDENT,
        )
        component.quantization_table = scanner.read_u8_field(
            "Quantization table (Tqi) [reserved, should be 0]", COMPONENT_INDENT
        )
        frame.components.append(component)

    if not scanner.jpegls_stream:
        logger.debug("Entering JPEG-LS stream mode at offset %d", scanner.position)
    scanner.jpegls_stream = True
    return frame


def dump_start_of_scan(scanner: MarkerScanner, marker_code: int) -> ScanHeader:
    scanner.print_header(marker_code, f"SOS (Start Of Scan), defined in {ITU_T81}")
    scan_header = ScanHeader()
    scan_header.size = scanner.read_u16_field("Size")
    component_count = scanner.read_u8_field("Component Count (Ns)")

    for _ in range(component_count):
        component = ScanComponent()
        component.identifier = scanner.read_u8_field("Component identifier (Ci)", COMPONENT_INDENT)
        position = scanner.position
        component.mapping_table_selector = scanner.source.read_u8()
        selector = component.mapping_table_selector
        scanner.print_field(
            position,
            "Mapping table selector (Tmi)",
            f"{selector} (None)" if selector == 0 else selector,
            COMPONENT_INDENT,
        )
        scan_header.components.append(component)

    scan_header.near_lossless = scanner.read_u8_field("Near lossless (NEAR parameter)")
    position = scanner.position
    scan_header.interleave_mode = scanner.source.read_u8()
    scanner.print_field(
        position,
        "Interleave mode (ILV parameter)",
        f"{scan_header.interleave_mode} ({interleave_mode_name(scan_header.interleave_mode)})",
    )
    scan_header.point_transform = scanner.read_u8_field("Point Transform (Al)")
    return scan_header


def dump_jpegls_extended_parameters(scanner: MarkerScanner, marker_code: int) -> PresetCodingParameters:
    scanner.print_header(marker_code, f"LSE (JPEG-LS Extended Parameters), defined in {ITU_T87}")
    parameters = PresetCodingParameters()
    parameters.size = scanner.read_u16_field("Size")
    position = scanner.position
    parameters.id = scanner.source.read_u8()

    if parameters.id != PRESET_CODING_PARAMETERS_ID:
        scanner.print_field(position, "Type (ID)", f"{parameters.id} (Unknown)")
        return parameters

    scanner.print_field(position, "Type (ID)", f"{parameters.id} (Preset coding parameters)")
    parameters.maximum_sample_value = scanner.read_u16_field("Maximum possible value (MAXVAL)")
    parameters.threshold1 = scanner.read_u16_field("First quantization threshold value (T1)")
    parameters.threshold2 = scanner.read_u16_field("Second quantization threshold value (T2)")
    parameters.threshold3 = scanner.read_u16_field("Third quantization threshold value (T3)")
    parameters.reset_value = scanner.read_u16_field("Reset value (RESET)")
    return parameters


def dump_define_restart_interval(scanner: MarkerScanner, marker_code: int) -> RestartInterval:
    """Print DRI; JPEG-LS allows a 3 or 4 byte interval besides the 2 byte form of T.81."""
    scanner.print_header(marker_code, f"DRI (Define Restart Interval), defined in {ITU_T81}")
    restart = RestartInterval()
    restart.size = scanner.read_u16_field("Size")
    interval_size = restart.size - 2
    if 2 <= interval_size <= 4:
        position = scanner.position
        restart.interval = scanner.source.read_uint(interval_size)
        scanner.print_field(position, "Restart interval (Ri)", restart.interval)
    return restart


def dump_application_data(scanner: MarkerScanner, marker_code: int) -> ApplicationData:
    scanner.print_header(marker_code, f"{APPLICATION_DATA_NAMES[marker_code]}, defined in {ITU_T81}")
    application_data = ApplicationData(marker_code=marker_code)
    application_data.size = scanner.read_u16_field("Size")
    payload_size = max(application_data.size - 2, 0)
    skipped = scanner.source.skip(payload_size)
    logger.debug("Skipped %d of %d bytes of %s data", skipped, payload_size, marker_info(marker_code))
    return application_data


def dump_comment(scanner: MarkerScanner, marker_code: int) -> Comment:
    scanner.print_header(marker_code, f"COM (Comment), defined in {ITU_T81}")
    comment = Comment()
    comment.size = scanner.read_u16_field("Size")
    position = scanner.position
    data = scanner.source.read_bytes(max(comment.size - 2, 0))
    # latin-1 maps every byte, repr escapes the non-printable ones
    comment.text = data.decode("latin-1")
    scanner.print_field(position, "Text", repr(comment.text))
    return comment


def dump_restart_marker(scanner: MarkerScanner, marker_code: int) -> None:
    index = marker_code - JpegMarker.RESTART_MARKER0
    scanner.print_header(marker_code, f"RST{index} (Restart marker {index}), defined in {ITU_T81}")


def dump_unknown_marker(scanner: MarkerScanner, marker_code: int) -> None:
    scanner.output(f"{scanner.start_offset:8} Marker 0xFF{marker_code:02X}")


DUMP_FUNCTIONS: Dict[int, Callable[[MarkerScanner, int], object]] = {
    JpegMarker.START_OF_IMAGE: dump_start_of_image,
    JpegMarker.END_OF_IMAGE: dump_end_of_image,
    JpegMarker.START_OF_FRAME_JPEGLS: dump_start_of_frame_jpegls,
    JpegMarker.START_OF_SCAN: dump_start_of_scan,
    JpegMarker.JPEGLS_EXTENDED_PARAMETERS: dump_jpegls_extended_parameters,
    JpegMarker.DEFINE_RESTART_INTERVAL: dump_define_restart_interval,
    JpegMarker.COMMENT: dump_comment,
}
DUMP_FUNCTIONS.update({marker: dump_application_data for marker in APPLICATION_DATA_NAMES})
DUMP_FUNCTIONS.update({marker: dump_restart_marker for marker in range(0xD0, 0xD8)})


def scan(f: BinaryIO, output: OutputSink = print, strict: bool = False) -> None:
    """
    Dump every marker segment found in a JPEG / JPEG-LS stream.

    Args:
        f: Binary stream positioned at the start of the JPEG data
        output: Callable receiving each formatted line
        strict: Raise on truncated segments instead of reading zeros
    """
    MarkerScanner(f, output, strict).scan()


def marker_detector(path: Union[str, Path], output: OutputSink = print, strict: bool = False) -> None:
    """Open the file at path and dump its marker segments."""
    with open(path, "rb") as f:
        scan(f, output, strict)
