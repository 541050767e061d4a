import os
import glob
import json
import logging
import numpy as np
from basketminer.Exceptions import PersistenceError
from basketminer.DataSet.ItemRegistry import ItemKeyRegistry
from basketminer.DataSet.Whitelist import Whitelist

logger = logging.getLogger(__name__)


class HelperFileStore(object):
    """
    persisted state shared between jobs: the item key registry and the per-iteration whitelists.
    every access opens, reads/writes fully and closes the file; it is the only channel between tasks
    """
    itemKeyFile="item-keyMap.json"
    keyItemFile="key-itemMap.json"
    readableMappingFile="mappingKeysToItems.txt"
    whitelistPattern="whitelist_{}_tupel-{:05d}.npz"

    def __init__(self,basePath):
        self.basePath=basePath

    def path(self,name):
        return os.path.join(self.basePath,name)

    def _ensureDir(self):
        try:
            os.makedirs(self.basePath,exist_ok=True)
        except OSError as e:
            raise PersistenceError(self.basePath,e)

    #item key registry
    def hasRegistry(self):
        return os.path.exists(self.path(self.itemKeyFile)) and os.path.exists(self.path(self.keyItemFile))

    def saveRegistry(self,registry:ItemKeyRegistry):
        self._ensureDir()
        try:
            with open(self.path(self.itemKeyFile),"w",encoding="utf-8") as f:
                json.dump(registry.itemKey,f)
            with open(self.path(self.keyItemFile),"w",encoding="utf-8") as f:
                json.dump({str(k):v for k,v in registry.keyItem.items()},f)
            with open(self.path(self.readableMappingFile),"w",encoding="utf-8") as f:
                for id,name in registry.items():
                    f.write("{}\t{}\n".format(id,name))
        except OSError as e:
            raise PersistenceError(self.basePath,"failed writing item key registry: {}".format(e))

        logger.info("serialized item key registry with {} items to {}".format(len(registry),self.basePath))

    def loadRegistry(self,missingOk=False):
        if not self.hasRegistry():
            if missingOk:
                logger.info("no cached version of the item key registry found in {}".format(self.basePath))
                return ItemKeyRegistry()
            raise PersistenceError(self.path(self.itemKeyFile),"item key registry not found")

        try:
            with open(self.path(self.itemKeyFile),"r",encoding="utf-8") as f:
                itemKey=json.load(f)
            with open(self.path(self.keyItemFile),"r",encoding="utf-8") as f:
                keyItem={int(k):v for k,v in json.load(f).items()}
            registry=ItemKeyRegistry(itemKey,keyItem)
        except (OSError,ValueError) as e:
            raise PersistenceError(self.basePath,"failed reading item key registry: {}".format(e))

        logger.debug("loaded item key registry with {} items".format(len(registry)))
        return registry

    #whitelists
    def whitelistFiles(self,tupelSize):
        pattern=self.path("whitelist_{}_tupel-*.npz".format(tupelSize))
        return sorted(glob.glob(pattern))

    def saveWhitelist(self,tupelSize,part,whitelist:Whitelist):
        self._ensureDir()
        fileName=self.path(self.whitelistPattern.format(tupelSize,part))
        try:
            with open(fileName,"wb") as f:
                np.savez_compressed(f,bits=whitelist.bits,numBits=np.array(whitelist.numBits,dtype=np.int64))
        except OSError as e:
            raise PersistenceError(fileName,"failed writing whitelist: {}".format(e))

        logger.info("whitelist fragment {} persisted for {}-tupel extraction with cardinality {}".format(
            part,tupelSize,whitelist.cardinality()))

    def loadWhitelist(self,tupelSize):
        "merge of all fragments of one iteration, None when the iteration left no whitelist"
        files=self.whitelistFiles(tupelSize)
        if len(files)==0:
            return None

        whitelist=None
        for fileName in files:
            try:
                with np.load(fileName) as data:
                    fragment=Whitelist(int(data["numBits"]),data["bits"])
            except (OSError,ValueError,KeyError) as e:
                raise PersistenceError(fileName,"failed reading whitelist: {}".format(e))

            if whitelist is None:
                whitelist=fragment
            else:
                whitelist.merge(fragment)

        logger.debug("loaded whitelist of {}-tupel extraction from {} fragments".format(tupelSize,len(files)))
        return whitelist

    def clearWhitelist(self,tupelSize):
        for fileName in self.whitelistFiles(tupelSize):
            self._remove(fileName)

    def cleanup(self):
        "delete everything but the readable key mapping"
        self._remove(self.path(self.itemKeyFile))
        self._remove(self.path(self.keyItemFile))
        for fileName in glob.glob(self.path("whitelist_*_tupel-*.npz")):
            self._remove(fileName)

    @staticmethod
    def _remove(fileName):
        try:
            if os.path.exists(fileName):
                os.remove(fileName)
        except OSError as e:
            raise PersistenceError(fileName,"failed deleting: {}".format(e))
