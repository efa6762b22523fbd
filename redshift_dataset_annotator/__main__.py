"""Allow `python -m redshift_dataset_annotator`."""

import sys

from redshift_dataset_annotator.cli import main

sys.exit(main())
