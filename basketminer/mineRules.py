import sys
import logging
import argparse
import basketminer
from basketminer.Configuration import buildConfig
from basketminer.Exceptions import ConfigurationError, MiningError
from basketminer.Mining.Driver import AssociationRules

logger = logging.getLogger(__name__)


def parseOptional(value,convert,name,default):
    "None when absent, the default (with a warning) when it does not convert"
    if value is None:
        return None
    try:
        return convert(value)
    except ValueError:
        logger.warning("problem converting {}={!r}, using default {}".format(name,value,default))
        return None

def parseBool(value):
    lowered=value.strip().lower()
    if lowered in ("true","1","yes"):
        return True
    if lowered in ("false","0","no"):
        return False
    raise ValueError(value)


def buildParser():
    parser = argparse.ArgumentParser(prog="basketminer",
                                     description="frequent itemsets and association rules from a basket file",
                                     epilog="e.g. basketminer data/sample.txt results 15 0.4 true")
    parser.add_argument('input', type=str, help='basket file or directory, one basket per line')
    parser.add_argument('output', type=str, help='output directory')
    parser.add_argument('support', type=str, nargs='?', default=None,
                        help='support threshold, integer >= 1 (default {})'.format(basketminer.SupportThreshold))
    parser.add_argument('confidence', type=str, nargs='?', default=None,
                        help='confidence threshold in [0,1] (default {})'.format(basketminer.ConfidenceThreshold))
    parser.add_argument('keep_helper_files', type=str, nargs='?', default=None,
                        help='true|false, keep the intermediary files (default true)')

    parser.add_argument('--config', type=str, default=None, help='json file with configuration values')
    parser.add_argument('--splitter', type=str, default=None, help='basket item delimiter')
    parser.add_argument('--max_k', type=str, default=None, help='largest itemset size to mine, 0 = unbounded')
    parser.add_argument('--whitelist_bits', type=str, default=None, help='size of the whitelist bit vector')
    parser.add_argument('--num_workers', type=str, default=None, help='number of worker processes')
    parser.add_argument('--num_map_tasks', type=str, default=None, help='number of input splits')
    parser.add_argument('--num_reducers', type=str, default=None, help='number of reduce tasks')
    parser.add_argument('--engine', type=str, choices=["local","spark"], default=None)
    parser.add_argument('--progress', action='store_true', default=None, help='show task progress bars')
    parser.add_argument('--verbose', action='store_true', help='debug logging')

    return parser


def main(argv=None):
    args=buildParser().parse_args(argv)

    logging.basicConfig(format = '%(asctime)s - %(levelname)s - %(name)s -   %(message)s',
                        datefmt = '%m/%d/%Y %H:%M:%S',
                        level = logging.DEBUG if args.verbose else logging.INFO)

    support=parseOptional(args.support,int,"support threshold",basketminer.SupportThreshold)
    if support is not None and support<1:
        logger.warning("support threshold must be >= 1, using default {}".format(basketminer.SupportThreshold))
        support=None
    confidence=parseOptional(args.confidence,float,"confidence threshold",basketminer.ConfidenceThreshold)
    if confidence is not None and not 0.0<=confidence<=1.0:
        logger.warning("confidence threshold must be in [0,1], using default {}".format(basketminer.ConfidenceThreshold))
        confidence=None
    keep=parseOptional(args.keep_helper_files,parseBool,"keep helper files",True)

    options={}
    for option,key in (("max_k","MAX_TUPEL_SIZE"),("whitelist_bits","WHITELIST_BITS"),("num_workers","NUM_WORKERS"),
                       ("num_map_tasks","NUM_MAP_TASKS"),("num_reducers","NUM_REDUCERS")):
        options[key]=parseOptional(getattr(args,option),int,"--"+option,basketminer.DEFAULTS[key])

    try:
        config=buildConfig(args.config,
                           SUPPORT_THRESHOLD=support,
                           CONFIDENCE_THRESHOLD=confidence,
                           KEEP_HELPER_FILES=keep,
                           BASKET_ITEM_SPLITTER=args.splitter,
                           ENGINE=args.engine,
                           SHOW_PROGRESS=args.progress,
                           **options)
    except (ConfigurationError,OSError,ValueError) as e:
        logger.error("invalid configuration: {}".format(e))
        return 2

    try:
        result=AssociationRules(config).run(args.input,args.output)
    except MiningError as e:
        logger.error("extraction failed: {}".format(e))
        logger.error("results of finished iterations are kept below {}".format(args.output))
        return 1

    logger.info(str(result))
    return 0


if __name__ == '__main__':
    sys.exit(main())
