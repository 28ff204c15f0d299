#!/usr/bin/env python3
"""
Tests for configuration loading, logging setup and project directories.
"""

import logging
from pathlib import Path

import pytest

from workflow_mags import constants
from workflow_mags.config import get_config, is_enabled, resolve_relative_paths
from workflow_mags.logger import setup_logging, setup_logging_from_config
from workflow_mags.utils.dir_utils import SubDirs


def test_default_config_loads():
    config = get_config(constants.DEFAULT_CONFIG_PATH)
    assert config['palette']['name'] == 'glasbey'
    assert config['sample_id']['fields'] == ['station', 'fraction', 'depth']
    assert isinstance(config['inputs']['counts'], Path)
    assert config['inputs']['counts'].is_absolute()


def test_relative_paths_resolved_against_config_dir(tmp_path):
    config_path = tmp_path / 'conf' / 'config.yaml'
    config_path.parent.mkdir()
    config_path.write_text(
        "project_dir: ../project\n"
        "inputs:\n"
        "  counts: ./counts.tsv\n"
        "  tree: /data/mags.tree\n"
        "figures:\n"
        "  save_as: [html]\n"
    )
    config = get_config(config_path)
    assert config['project_dir'] == (tmp_path / 'project').resolve()
    assert config['inputs']['counts'] == (tmp_path / 'conf' / 'counts.tsv').resolve()
    assert config['inputs']['tree'] == '/data/mags.tree'
    assert config['figures']['save_as'] == ['html']


def test_resolve_relative_paths_leaves_other_values():
    config = resolve_relative_paths({'a': 'glasbey', 'b': 3}, Path('/tmp'))
    assert config == {'a': 'glasbey', 'b': 3}


def test_missing_config():
    with pytest.raises(FileNotFoundError):
        get_config('/nonexistent/config.yaml')


def test_empty_config(tmp_path):
    config_path = tmp_path / 'config.yaml'
    config_path.write_text("")
    assert get_config(config_path) == {}


def test_is_enabled():
    config = {'heatmap': {'enabled': False}, 'ordination': {}}
    assert not is_enabled(config, 'heatmap')
    assert is_enabled(config, 'ordination')
    assert is_enabled(config, 'feature_abundance')
    assert not is_enabled(config, 'feature_abundance', default=False)


def test_setup_logging_writes_file(tmp_path):
    logger = setup_logging(tmp_path / 'logs', log_filename='run.log')
    logger.debug("debug line")
    for handler in logger.handlers:
        handler.flush()
    log_text = (tmp_path / 'logs' / 'run.log').read_text()
    assert "debug line" in log_text

    # Re-running replaces handlers instead of stacking them
    logger = setup_logging(tmp_path / 'logs', log_filename='run.log')
    assert len(logger.handlers) == 2
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def test_subdirs(tmp_path):
    dirs = SubDirs(tmp_path / 'project')
    for path in (dirs.logs, dirs.tables, dirs.heatmaps, dirs.ordination,
                 dirs.feature_abundance):
        assert path.is_dir()
        assert tmp_path / 'project' in path.parents


def test_setup_logging_from_config(tmp_path):
    logger = setup_logging_from_config(
        tmp_path / 'logs',
        {'console_level': 'warning', 'file_level': 'info', 'filename': 'cfg.log'}
    )
    file_handler, console_handler = logger.handlers
    assert file_handler.level == logging.INFO
    assert console_handler.level == logging.WARNING
    assert (tmp_path / 'logs' / 'cfg.log').exists()
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def test_unknown_log_level(tmp_path):
    with pytest.raises(ValueError, match="Unknown log level"):
        setup_logging(tmp_path / 'logs', console_level='chatty')
