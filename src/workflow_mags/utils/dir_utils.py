# ===================================== IMPORTS ====================================== #

from typing import Union
from pathlib import Path

import logging

# ========================== INITIALIZATION & CONFIGURATION ========================== #

logger = logging.getLogger('workflow_mags')

# ==================================== CLASSES ======================================= #

class SubDirs:
    def __init__(self, dir_path: Union[str, Path]):
        self.main = Path(dir_path)
        self.logs = self.main / 'logs'
        self.final = self.main / 'final'
        self.tables = self.final / 'tables'
        self.figures = self.final / 'figures'
        self.heatmaps = self.figures / 'heatmaps'
        self.ordination = self.figures / 'ordination'
        self.feature_abundance = self.figures / 'feature_abundance'
        self.create_dirs()

    def create_dirs(self):
        dirs = [
            self.main,
            self.logs,
            self.final,
            self.tables,
            self.figures,
            self.heatmaps,
            self.ordination,
            self.feature_abundance,
        ]
        for _dir in dirs:
            _dir.mkdir(parents=True, exist_ok=True)
