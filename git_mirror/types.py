from typing import Literal

type ExitCode = int

type RemoteName = Literal["upstream", "downstream", "backup"]
type RemoteSource = Literal["upstream", "downstream"]

type BranchMapping = dict[str, str | None]
