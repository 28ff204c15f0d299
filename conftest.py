"""
Shared fixtures: a small ocean MAG dataset written to a temporary directory.
Four MAGs across four samples from two stations in two Longhurst provinces.
"""

import io
import textwrap
from pathlib import Path

import pandas as pd
import pytest

from workflow_mags.mag_data.container import MAGData


FEATURES = ['bin_1', 'bin_2', 'bin_3', 'bin_4']
SAMPLES = [
    'TARA_018_0.22-3_SRF',
    'TARA_018_0.22-3_DCM',
    'TARA_023_0.8-5_SRF',
    'TARA_023_0.8-5_DCM',
]

TAXONOMY_TSV = textwrap.dedent("""\
    Bin\tClassification\tCompleteness\tContamination\tGenome Size
    bin_1\td__Bacteria;p__Proteobacteria;c__Alphaproteobacteria;o__Pelagibacterales;f__Pelagibacteraceae;g__Pelagibacter;s__\t80\t1.2\t2000000
    bin_2\td__Bacteria;p__Cyanobacteria;c__Cyanobacteriia;o__PCC-6307;f__Cyanobiaceae;g__Prochlorococcus_A;s__Prochlorococcus_A marinus\t95\t0.5\t1710000
    bin_3\td__Archaea;p__Thermoplasmatota;c__Poseidoniia;o__Poseidoniales;f__;g__;s__\t50\t3.0\t1500000
    bin_4\tUnclassified\t100\t0.0\t3000000
""")

COUNTS_TSV = textwrap.dedent("""\
    bin\tTARA_018_0.22-3_SRF\tTARA_018_0.22-3_DCM\tTARA_023_0.8-5_SRF\tTARA_023_0.8-5_DCM
    bin_1\t500\t400\t20\t10
    bin_2\t1000\t50\t800\t30
    bin_3\t0\t300\t10\t600
    bin_4\t60\t60\t300\t200
""")

SAMPLE_METADATA_TSV = textwrap.dedent("""\
    Sample ID\tSize Fraction\tdepth_m
    TARA_018_0.22-3_SRF\t0.22-3 um\t5
    TARA_018_0.22-3_DCM\t0.22-3 um\t60
    TARA_023_0.8-5_SRF\t0.8-5 um\t5
    TARA_023_0.8-5_DCM\t0.8-5 um\t55
""")

STATION_METADATA_TSV = textwrap.dedent("""\
    Station\tProvince\tLatitude\tLongitude
    TARA_018\tMEDI\t39.9\t2.8
    TARA_023\tNAST\t42.2\t-17.7
""")

TREE_NWK = "((bin_1:0.1,bin_2:0.2):0.3,(bin_3:0.1,bin_4:0.4):0.2);\n"


@pytest.fixture
def mag_files(tmp_path: Path) -> dict:
    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    files = {
        'taxonomy': (data_dir / 'mags_taxonomy_quality.tsv', TAXONOMY_TSV),
        'counts': (data_dir / 'mags_read_counts.tsv', COUNTS_TSV),
        'sample_metadata': (data_dir / 'sample_metadata.tsv', SAMPLE_METADATA_TSV),
        'station_metadata': (data_dir / 'station_metadata.tsv', STATION_METADATA_TSV),
        'tree': (data_dir / 'mags.tree', TREE_NWK),
    }
    for path, content in files.values():
        path.write_text(content)
    return {name: path for name, (path, _) in files.items()}


@pytest.fixture
def mag_config(mag_files: dict, tmp_path: Path) -> dict:
    return {
        'project_dir': tmp_path / 'project',
        'inputs': mag_files,
        'columns': {'taxonomy': {'feature_id': 'Bin', 'genome_size': 'Genome Size'}},
        'sample_id': {'column': 'Sample ID'},
    }


@pytest.fixture
def mag_data(mag_config: dict) -> MAGData:
    return MAGData.from_config(mag_config)


@pytest.fixture
def counts() -> pd.DataFrame:
    return pd.read_csv(io.StringIO(COUNTS_TSV), sep='\t', index_col=0)
