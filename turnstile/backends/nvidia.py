"""
NVIDIA Device Backend.

Enumeration and usage checks shell out to ``nvidia-smi``; placeholder
holds are PyTorch allocations on the device. A device is idle when no
compute process runs on it. While turnstile holds a device, its own CUDA
context is the single expected process, so a second process means the
launched command has taken the device over.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
import os
import subprocess
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set, Tuple

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import torch

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from .base import ResourceHold, ResourceId
from ..core.errors import BackendError
from ..core.paths import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

NVIDIA_SMI = "nvidia-smi"
SMI_TIMEOUT_SECONDS = 30.0

# Share of the currently free memory taken by a placeholder
PLACEHOLDER_FRACTION = 4


class NvidiaBackend:
    """
    ResourceBackend implementation for NVIDIA GPUs.

    Args:
        smi_path: ``nvidia-smi`` executable.
        timeout: Seconds before an ``nvidia-smi`` call is considered hung.
    """

    def __init__(self, smi_path: str = NVIDIA_SMI, timeout: float = SMI_TIMEOUT_SECONDS):
        self.smi_path = smi_path
        self.timeout = timeout
        self._uuids: Optional[Dict[ResourceId, str]] = None

        # PyTorch ordinals must match nvidia-smi indices; read when CUDA initialises
        os.environ["CUDA_DEVICE_ORDER"] = "PCI_BUS_ID"

    # --- nvidia-smi queries ---

    def _query(self, args: Sequence[str]) -> List[List[str]]:
        cmd = [self.smi_path, *args, "--format=csv,noheader,nounits"]
        try:
            out = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            ).stdout
        except FileNotFoundError as e:
            raise BackendError(f"{self.smi_path} not found; is the NVIDIA driver installed?") from e
        except subprocess.CalledProcessError as e:
            raise BackendError(
                f"{' '.join(cmd)} failed with status {e.returncode}: {(e.stderr or '').strip()}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise BackendError(f"{' '.join(cmd)} timed out after {self.timeout:g}s") from e

        return [
            [field.strip() for field in line.split(",")]
            for line in out.splitlines()
            if line.strip()
        ]

    def _device_uuids(self) -> Dict[ResourceId, str]:
        if self._uuids is None:
            uuids: Dict[ResourceId, str] = {}
            for row in self._query(["--query-gpu=index,uuid"]):
                try:
                    uuids[int(row[0])] = row[1]
                except (IndexError, ValueError) as e:
                    raise BackendError(f"Unexpected nvidia-smi GPU row: {row}") from e
            self._uuids = uuids
        return self._uuids

    def _processes_by_uuid(self) -> Dict[str, Set[str]]:
        procs: Dict[str, Set[str]] = defaultdict(set)
        for row in self._query(["--query-compute-apps=gpu_uuid,pid"]):
            if len(row) >= 2:
                procs[row[0]].add(row[1])
        return procs

    # --- ResourceBackend ---

    def device_count(self) -> int:
        return len(self._device_uuids())

    def enumerate(self) -> List[Tuple[ResourceId, bool]]:
        """Returns ``(index, idle)`` for every GPU, ordered by index."""
        uuids = self._device_uuids()
        procs = self._processes_by_uuid()
        return [(idx, not procs.get(uuid)) for idx, uuid in sorted(uuids.items())]

    def usage_exceeds_placeholder(self, resource_id: ResourceId) -> bool:
        uuid = self._device_uuids().get(resource_id)
        if uuid is None:
            raise BackendError("Unknown device", resource_id=resource_id)
        return len(self._processes_by_uuid().get(uuid, ())) > 1

    def hold(self, resource_id: ResourceId) -> ResourceHold:
        """
        Allocates a quarter of the device's free memory as a placeholder.

        The allocation also creates this process's CUDA context on the
        device, which is what makes it report as busy to other instances.
        """
        try:
            free, _total = torch.cuda.mem_get_info(resource_id)
            placeholder = torch.empty(
                free // PLACEHOLDER_FRACTION,
                dtype=torch.uint8,
                device=torch.device("cuda", resource_id),
            )
        except (RuntimeError, AssertionError) as e:
            raise BackendError(f"Failed to place hold: {e}", resource_id=resource_id) from e

        logger.debug(f"Holding {placeholder.numel() / 1024**3:.2f} GB on device {resource_id}")
        return ResourceHold(resource_id=resource_id, payload=placeholder)

    def release(self, hold: ResourceHold) -> None:
        hold.payload = None
        try:
            with torch.cuda.device(hold.resource_id):
                torch.cuda.empty_cache()
        except (RuntimeError, AssertionError) as e:
            logger.warning(f"Failed to flush CUDA cache on device {hold.resource_id}: {e}")
