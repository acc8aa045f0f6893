import struct
from typing import Iterator, Tuple

# Event Types
EVT_VISIT = 0x02
EVT_CARVE = 0x03
EVT_STEP = 0x04

STAGE_CODES = {"initial": 0, "guess": 1, "aftercheck": 2}
STAGE_NAMES = {code: name for name, code in STAGE_CODES.items()}


class EventWriter:
    def __init__(self, filename: str):
        self.filename = filename
        self.file = open(filename, "wb")

    def write_header(self, width: int, height: int):
        # Header: Magic "PIPELOG" + Width (4b) + Height (4b)
        self.file.write(b"PIPELOG")
        self.file.write(struct.pack(">II", width, height))

    def log_visit(self, index: int):
        # 1 byte type + 4 byte index
        self.file.write(struct.pack(">BI", EVT_VISIT, index))

    def log_carve(self, index: int, direction: int):
        # 1 byte type + 4b index + 1b direction
        self.file.write(struct.pack(">BIB", EVT_CARVE, index, direction))

    def log_step(self, stage, step):
        # 1 byte type + 1b stage + 4b index + 1b orientation + 1b final
        data = struct.pack(
            ">BBIBB", EVT_STEP, STAGE_CODES[str(getattr(stage, "value", stage))],
            step.index, step.orientation, 1 if step.final else 0,
        )
        self.file.write(data)

    def close(self):
        if self.file:
            self.file.close()
            self.file = None


class EventReader:
    def __init__(self, filename: str):
        self.filename = filename
        self.file = open(filename, "rb")
        self.width = 0
        self.height = 0

    def read_header(self) -> Tuple[int, int]:
        magic = self.file.read(7)
        if magic != b"PIPELOG":
            raise ValueError("Invalid event log file")
        data = self.file.read(8)
        self.width, self.height = struct.unpack(">II", data)
        return self.width, self.height

    def stream_events(self) -> Iterator[Tuple[int, Tuple]]:
        while True:
            type_byte = self.file.read(1)
            if not type_byte:
                break

            type_code = ord(type_byte)

            if type_code == EVT_VISIT:
                (index,) = struct.unpack(">I", self.file.read(4))
                yield (type_code, (index,))

            elif type_code == EVT_CARVE:
                index, direction = struct.unpack(">IB", self.file.read(5))
                yield (type_code, (index, direction))

            elif type_code == EVT_STEP:
                stage, index, orientation, final = struct.unpack(">BIBB", self.file.read(7))
                yield (type_code, (STAGE_NAMES[stage], index, orientation, bool(final)))

            else:
                raise ValueError(f"Unknown event type {type_code:#x}")

    def close(self):
        if self.file:
            self.file.close()
            self.file = None
