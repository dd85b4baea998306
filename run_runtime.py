# run_runtime.py
import os
import sys

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(dotenv_path=os.path.join(basedir, '.env'))

from aquasense.runtime.runner import main

if __name__ == '__main__':
    sys.exit(main())
