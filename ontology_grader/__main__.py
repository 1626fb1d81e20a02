"""Allow running as: python -m ontology_grader"""

import sys

from ontology_grader.main import main

if __name__ == "__main__":
    sys.exit(main())
