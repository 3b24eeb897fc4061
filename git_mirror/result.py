from dataclasses import dataclass


@dataclass
class MirrorResult:
    errors_occurred: bool = False

    def record(self, success: bool) -> bool:
        # Once an error has occurred, the whole run has failed.
        if not success:
            self.errors_occurred = True
        return success

    @property
    def succeeded(self) -> bool:
        return not self.errors_occurred
