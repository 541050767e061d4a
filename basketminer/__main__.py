import sys
from basketminer.mineRules import main

sys.exit(main())
