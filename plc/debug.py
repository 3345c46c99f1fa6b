import sys
from typing import Optional, TextIO


class Tracer:
    """Debug trace sink shared by the analyzer and the interpreter.

    Nothing is written at debug level 0. Above that, trace lines go to
    `debug_file` when one is given, otherwise to standard error.
    """
    def __init__(self, debug_level: int = 0, debug_file: Optional[str] = None):
        self.debug_level = debug_level
        self.debug_fp: Optional[TextIO] = None
        if debug_level > 0 and debug_file is not None:
            self.debug_fp = open(debug_file, 'a', encoding='utf-8')

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def close_debug(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None
