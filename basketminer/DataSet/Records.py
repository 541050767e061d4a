import os
import logging
from basketminer.Exceptions import PersistenceError

logger = logging.getLogger(__name__)


def parseBasket(line,splitter=","):
    "item names of one input line, first occurrence order, duplicates and empty items dropped"
    basket=[]
    seen=set()
    for item in line.strip().split(splitter):
        item=item.strip()
        if not item or item in seen:
            continue
        seen.add(item)
        basket.append(item)
    return basket

def formatRecord(key,value):
    return "{}\t{}".format(key,value)

def parseRecord(line):
    key,value=line.rstrip("\n").split("\t")
    return key,value

def partFiles(path):
    "the data files of a job output directory (hadoop style, files starting with _ or . are skipped)"
    if os.path.isfile(path):
        return [path]
    if not os.path.isdir(path):
        raise PersistenceError(path,"no such file or directory")
    names=sorted(n for n in os.listdir(path) if not n.startswith("_") and not n.startswith("."))
    return [os.path.join(path,n) for n in names if os.path.isfile(os.path.join(path,n))]

def readLines(paths):
    if isinstance(paths,str):
        paths=[paths]
    for path in paths:
        for fileName in partFiles(path):
            try:
                with open(fileName,"r",encoding="utf-8") as f:
                    for line in f:
                        line=line.rstrip("\n")
                        if line:
                            yield line
            except OSError as e:
                raise PersistenceError(fileName,e)


class SupportTable(object):
    """
    read-only canonical key -> support lookup over persisted frequent itemset records,
    side-loaded by every rule reduce task instead of relying on sibling keys
    """
    def __init__(self,supports=None):
        self.supports=dict(supports) if supports else {}

    @staticmethod
    def load(paths):
        table=SupportTable()
        for line in readLines(paths):
            key,value=parseRecord(line)
            table.supports[key]=int(value)
        logger.info("loaded support table with {} frequent itemsets".format(len(table)))
        return table

    def get(self,key,default=None):
        return self.supports.get(key,default)

    def __getitem__(self,key):
        return self.supports[key]

    def __contains__(self,key):
        return key in self.supports

    def __len__(self):
        return len(self.supports)


def writePartFile(outputPath,partition,pairs):
    fileName=os.path.join(outputPath,"part-r-{:05d}".format(partition))
    try:
        os.makedirs(outputPath,exist_ok=True)
        with open(fileName,"w",encoding="utf-8") as f:
            for key,value in pairs:
                f.write(formatRecord(key,value)+"\n")
    except OSError as e:
        raise PersistenceError(fileName,e)
    return fileName
