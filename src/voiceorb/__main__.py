import sys

from voiceorb.cli import main

sys.exit(main())
