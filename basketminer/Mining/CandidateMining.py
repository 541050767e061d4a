import logging
from basketminer.Exceptions import PersistenceError
from basketminer.DataSet.HelperFiles import HelperFileStore
from basketminer.DataSet.Records import parseBasket
from basketminer.DataSet.Whitelist import Whitelist
from basketminer.MapReduce.Job import Mapper, Reducer, TaskContext
from basketminer.Utility.Combinatorics import Subsets, canonicalKey

logger = logging.getLogger(__name__)


class Counters(object):
    INPUTLINES="INPUTLINES"
    MALFORMED_LINES="MALFORMED_LINES"
    SHORT_BASKETS="SHORT_BASKETS"
    WRITTENSETS="WRITTENSETS"
    REJECTED_WL="REJECTED_WL"
    ITEMS="ITEMS"
    NEW_ITEMS="NEW_ITEMS"
    FREQUENT_ITEMSETS="FREQUENT_ITEMSETS"
    DECLINED_SETS="DECLINED_SETS"


class SumCombiner(Reducer):
    """
    partial sum of the counts sharing a key. associative and commutative, applied any number
    of times to any part of a task's output; it never applies the support threshold, a partial
    sum below the threshold may still belong to a frequent global sum
    """
    def reduce(self,key,values,context:TaskContext):
        context.write(key,sum(values))


########item key registry job

class RegistryMapper(Mapper):
    "emits every distinct item name of a basket with count 1"
    def setup(self,context:TaskContext):
        self.splitter=context.conf["BASKET_ITEM_SPLITTER"]

    def map(self,line,context:TaskContext):
        context.increment(Counters.INPUTLINES)
        basket=parseBasket(line,self.splitter)
        if len(basket)==0:
            context.increment(Counters.MALFORMED_LINES)
            return
        for name in basket:
            context.write(name,1)


class RegistryReducer(Reducer):
    """
    runs as the single reduce task of the registry job: ids are handed out in sorted name order
    on top of any registry persisted by an earlier run, then the registry is written once
    """
    def setup(self,context:TaskContext):
        if context.numPartitions!=1:
            raise ValueError("the registry job needs exactly one reduce task, got {}".format(context.numPartitions))
        self.store=HelperFileStore(context.conf["TMP_FILE_PATH"])
        self.registry=self.store.loadRegistry(missingOk=True)

    def reduce(self,key,values,context:TaskContext):
        if key not in self.registry:
            context.increment(Counters.NEW_ITEMS)
        self.registry.lookupOrCreate(key)
        context.increment(Counters.ITEMS)
        context.write(key,sum(values))

    def cleanup(self,context:TaskContext):
        self.store.saveRegistry(self.registry)


########candidate generation: one job per tupel size k

class CandidateMapper(Mapper):
    """
    emits (canonical key,1) for every k-subset of a basket whose (k-1)-subsets
    were all frequent in the previous iteration
    """
    def setup(self,context:TaskContext):
        conf=context.conf
        self.tupelSize=int(conf["TUPEL_SIZE"])
        self.splitter=conf["BASKET_ITEM_SPLITTER"]
        self.separator=conf["KEY_SEPARATOR"]

        store=HelperFileStore(conf["TMP_FILE_PATH"])
        self.storePath=store.basePath
        self.registry=store.loadRegistry()

        self.whitelist=None
        if self.tupelSize>1:
            self.whitelist=store.loadWhitelist(self.tupelSize-1)
            if self.whitelist is None:
                raise PersistenceError(store.basePath,
                    "no whitelist found from previous {}-tupel extraction".format(self.tupelSize-1))
            logger.info("whitelist of {}-tupel extraction loaded with cardinality {}, false positive rate {:.6f}".format(
                self.tupelSize-1,self.whitelist.cardinality(),self.whitelist.falsePositiveRate()))

    def map(self,line,context:TaskContext):
        context.increment(Counters.INPUTLINES)

        basket=parseBasket(line,self.splitter)
        if len(basket)==0:
            context.increment(Counters.MALFORMED_LINES)
            return
        if len(basket)<self.tupelSize:
            context.increment(Counters.SHORT_BASKETS)
            return

        try:
            ids=[self.registry.lookup(name) for name in basket]
        except KeyError as e:
            raise PersistenceError(self.storePath,"item {} missing from the item key registry".format(e))

        for subset in Subsets(ids,self.tupelSize):
            if self.isAllowed(subset):
                context.write(canonicalKey(subset,self.separator),1)
                context.increment(Counters.WRITTENSETS)
            else:
                context.increment(Counters.REJECTED_WL)

    def isAllowed(self,subset):
        if self.whitelist is None:
            return True
        for smaller in Subsets(subset,self.tupelSize-1):
            if not self.whitelist.contains(canonicalKey(smaller,self.separator)):
                return False
        return True


CandidateCombiner=SumCombiner


class CandidateReducer(Reducer):
    "global support filter; frequent keys go to the output and into this task's whitelist fragment"
    def setup(self,context:TaskContext):
        conf=context.conf
        self.supportThreshold=int(conf["SUPPORT_THRESHOLD"])
        self.tupelSize=int(conf["TUPEL_SIZE"])
        self.store=HelperFileStore(conf["TMP_FILE_PATH"])
        self.whitelist=Whitelist(int(conf["WHITELIST_BITS"]))

    def reduce(self,key,values,context:TaskContext):
        support=sum(values)
        if support>=self.supportThreshold:
            self.whitelist.add(key)
            context.write(key,support)
            context.increment(Counters.FREQUENT_ITEMSETS)
        else:
            context.increment(Counters.DECLINED_SETS)

    def cleanup(self,context:TaskContext):
        self.store.saveWhitelist(self.tupelSize,context.partition,self.whitelist)
