# Copyright (c) 2025, NVIDIA CORPORATION.  All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import time
import threading
import logging as log
from collections.abc import Iterator, Sequence
from concurrent import futures
from functools import partial

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from pci_exporter.collectors import MetricCollector, MetricSample, default_collectors
from pci_exporter.config import ExporterConfig
from pci_exporter.pcie.enumerator import list_devices

Task = tuple[str, MetricCollector]


class PciCollector(Collector):
    """Custom prometheus_client collector for all PCI device metrics.

    Each scrape lists the devices once, then runs every metric collector
    against every device. With more than one worker the reads run on a thread
    pool and the scrape thread drains the results in task order; with one
    worker they run inline.
    """

    def __init__(self, config: ExporterConfig, collectors: Sequence[MetricCollector] | None = None) -> None:
        self.config = config
        if collectors is None:
            collectors = default_collectors(config.sysfs_base)
        self.collectors = list(collectors)
        self._executor = None
        if config.max_workers > 1:
            self._executor = futures.ThreadPoolExecutor(
                max_workers=config.max_workers, thread_name_prefix="pci-collect"
            )
        # Unfinished reads keyed by (device, metric name). Reentrant because an
        # already finished future runs its done callback in the submitting thread.
        self._in_flight: dict[tuple[str, str], futures.Future] = {}
        self._in_flight_lock = threading.RLock()

    def describe(self) -> Iterator[GaugeMetricFamily]:
        for collector in self.collectors:
            yield collector.describe()

    def collect(self) -> Iterator[GaugeMetricFamily]:
        families = {collector.name: collector.describe() for collector in self.collectors}

        devices = list(dict.fromkeys(list_devices(self.config.driver_filter, self.config.sysfs_base)))
        tasks = [(device, collector) for device in devices for collector in self.collectors]

        for sample in self._gather(tasks):
            families[sample.name].add_metric(sample.labels, sample.value)

        log.debug(f"Scrape finished: {len(devices)} devices, {len(tasks)} tasks")
        yield from families.values()

    def close(self) -> None:
        executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)

    def _gather(self, tasks: list[Task]) -> Iterator[MetricSample]:
        executor = self._executor
        if executor is None:
            for device, collector in tasks:
                yield from self._run_inline(device, collector)
            return

        deadline = time.monotonic() + self.config.scrape_timeout
        submitted = []
        still_running = []
        with self._in_flight_lock:
            for device, collector in tasks:
                key = (device, collector.name)
                previous = self._in_flight.get(key)
                if previous is not None and not previous.done():
                    still_running.append(f"{collector.name}/{device}")
                    submitted.append(None)
                    continue
                try:
                    future = executor.submit(collector.collect, device)
                except RuntimeError:
                    log.debug("Worker pool is shut down, skipping the remaining reads")
                    break
                self._in_flight[key] = future
                future.add_done_callback(partial(self._forget, key))
                submitted.append(future)

        if still_running:
            log.warning(
                f"Skipping {len(still_running)} reads still running from an earlier scrape: "
                f"{', '.join(still_running[:10])}"
            )

        timed_out = []
        for (device, collector), future in zip(tasks, submitted):
            if future is None:
                continue
            remaining = max(deadline - time.monotonic(), 0)
            try:
                samples = future.result(timeout=remaining)
            except futures.TimeoutError:
                future.cancel()
                timed_out.append(f"{collector.name}/{device}")
                continue
            except futures.CancelledError:
                log.debug(f"{collector.name}: read for device {device} cancelled at shutdown")
                continue
            except Exception:
                log.exception(f"{collector.name}: unexpected failure for device {device}")
                continue
            yield from samples

        if timed_out:
            log.warning(
                f"Scrape deadline of {self.config.scrape_timeout}s exceeded, "
                f"dropped {len(timed_out)} reads: {', '.join(timed_out[:10])}"
            )

    def _forget(self, key: tuple[str, str], future: futures.Future) -> None:
        with self._in_flight_lock:
            if self._in_flight.get(key) is future:
                del self._in_flight[key]

    @staticmethod
    def _run_inline(device: str, collector: MetricCollector) -> list[MetricSample]:
        try:
            return collector.collect(device)
        except Exception:
            log.exception(f"{collector.name}: unexpected failure for device {device}")
            return []
