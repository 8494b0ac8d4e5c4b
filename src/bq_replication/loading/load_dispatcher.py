"""
Load dispatcher for staged export files.

Each staged object is loaded by running one sling task built from the
source's load-job template. The dispatcher waits for the task to finish.
"""

import json
from typing import Any, Dict, Optional

from sling import Task

from bq_replication.audit.logger import ReplicationLogger
from bq_replication.config.models import LoadJobTemplate, LoadMode
from bq_replication.core.exceptions import LoadInvocationFailedError

TASK_KEYS = ("source", "target", "mode", "options", "env")


class LoadDispatcher:
    """Runs sling tasks for staged objects."""

    def __init__(self, logger: ReplicationLogger):
        """
        Initialize the load dispatcher.

        Args:
            logger: Logger instance
        """
        self.logger = logger

    def build_load_job(
        self,
        template: LoadJobTemplate,
        object_path: str,
        mode_override: Optional[LoadMode] = None,
    ) -> Dict[str, Any]:
        """Sling task arguments for one object."""
        task = template.for_object(object_path, mode_override).to_task()
        return {key: task[key] for key in TASK_KEYS if key in task}

    def dispatch_load(
        self,
        template: LoadJobTemplate,
        object_path: str,
        mode_override: Optional[LoadMode] = None,
    ) -> None:
        """
        Load one staged object and wait for sling to finish.

        Args:
            template: Load-job template of the source
            object_path: ``gs://`` URI of the object to load
            mode_override: Mode replacing the template's, if any

        Raises:
            LoadInvocationFailedError: If the sling task can't be built or fails
        """
        task_config = self.build_load_job(template, object_path, mode_override)

        self.logger.info(
            f"Loading {object_path} into {template.target.object_name} "
            f"({task_config['mode']})",
            extra={"object": object_path, "operation": "load", "mode": task_config["mode"]},
        )
        self.logger.debug(json.dumps(task_config), extra={"object": object_path})

        try:
            Task(**task_config).run()
        except Exception as e:
            raise LoadInvocationFailedError(object_path, str(e)) from e
