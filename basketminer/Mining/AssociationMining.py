import logging
from basketminer.DataSet.HelperFiles import HelperFileStore
from basketminer.DataSet.Records import SupportTable, parseRecord
from basketminer.MapReduce.Job import Mapper, Reducer, TaskContext, hashPartitioner
from basketminer.Utility.Combinatorics import Permutations, canonicalKey, joinKey, parseKey, \
    splitPermutation, sortMapByValues

logger = logging.getLogger(__name__)


class Counters(object):
    PERMUTATIONS="PERMUTATIONS"
    SINGLE_ITEMS="SINGLE_ITEMS"
    RULES="RULES"
    DUPLICATE_RULES="DUPLICATE_RULES"
    UNRESOLVED_RULES="UNRESOLVED_RULES"
    RANKED_RULES="RANKED_RULES"
    BELOW_THRESHOLD="BELOW_THRESHOLD"


class ItemsetPartitioner(object):
    "routes every ordering of one itemset to the same reduce task"
    def __init__(self,separator=";"):
        self.separator=separator

    def __call__(self,key,numPartitions):
        return hashPartitioner(canonicalKey(parseKey(key,self.separator),self.separator),numPartitions)


class AssociationMapper(Mapper):
    """
    input : frequent itemset record, e.g. 1;2;3<TAB>3
    output: every ordering of the itemset with the unchanged support, e.g. 2;1;3 -> 3

    n! orderings cut at n-1 positions cover all 2^n-2 antecedent/consequent splits,
    most of them several times; the reducer drops the repeats
    """
    def setup(self,context:TaskContext):
        self.separator=context.conf["KEY_SEPARATOR"]

    def map(self,line,context:TaskContext):
        key,support=parseRecord(line)
        support=int(support)
        for permutation in Permutations(parseKey(key,self.separator)):
            context.write(joinKey(permutation,self.separator),support)
            context.increment(Counters.PERMUTATIONS)


class AssociationReducer(Reducer):
    """
    input : ordered itemset key and its support
    output: one candidate rule per cut of the ordering not yet seen for this itemset,
            keyed by the cut as given, e.g. 2;1->3, valued with its confidence

    the antecedent support comes from the support table of all persisted frequent itemsets,
    so the result does not depend on which keys share this task
    """
    def setup(self,context:TaskContext):
        conf=context.conf
        self.separator=conf["KEY_SEPARATOR"]
        self.componentDelimiter=conf["RULE_COMPONENT_DELIMITER"]
        self.supportTable=SupportTable.load(conf["FREQUENT_ITEMSETS_PATHS"])
        # canonical itemset key -> {(canonical antecedent, canonical consequent)}
        self.blackList={}

    def reduce(self,key,values,context:TaskContext):
        # values should only have 1 element
        support=sum(values)

        ids=parseKey(key,self.separator)
        if len(ids)<2:
            context.increment(Counters.SINGLE_ITEMS)
            return

        seen=self.blackList.setdefault(canonicalKey(ids,self.separator),set())

        for ante,cons in splitPermutation(ids):
            rule=(canonicalKey(ante,self.separator),canonicalKey(cons,self.separator))
            if rule in seen:
                context.increment(Counters.DUPLICATE_RULES)
                continue
            seen.add(rule)

            anteSupport=self.supportTable.get(rule[0])
            if not anteSupport:
                logger.warning("failed calculating confidence of {}{}{}: no support for antecedent".format(
                    rule[0],self.componentDelimiter,rule[1]))
                context.increment(Counters.UNRESOLVED_RULES)
                continue

            ruleKey=joinKey(ante,self.separator)+self.componentDelimiter+joinKey(cons,self.separator)
            context.write(ruleKey,support/float(anteSupport))
            context.increment(Counters.RULES)

    def cleanup(self,context:TaskContext):
        self.blackList=None


########ranking: a single reduce task sorting every rule of the stage

class RankingMapper(Mapper):
    "re-keys a rule by its canonical form, e.g. 2;1->3 becomes 1;2->3"
    def setup(self,context:TaskContext):
        self.separator=context.conf["KEY_SEPARATOR"]
        self.componentDelimiter=context.conf["RULE_COMPONENT_DELIMITER"]

    def map(self,line,context:TaskContext):
        key,confidence=parseRecord(line)
        ante,cons=key.split(self.componentDelimiter)
        ante=canonicalKey(parseKey(ante,self.separator),self.separator)
        cons=canonicalKey(parseKey(cons,self.separator),self.separator)
        context.write(ante+self.componentDelimiter+cons,float(confidence))


class RankingReducer(Reducer):
    """
    keeps rules with confidence >= threshold, sorted by confidence descending,
    written with the item names of the registry: {a,b}->{c}<TAB>0.66
    """
    def setup(self,context:TaskContext):
        if context.numPartitions!=1:
            raise ValueError("rule ranking needs exactly one reduce task, got {}".format(context.numPartitions))
        conf=context.conf
        self.separator=conf["KEY_SEPARATOR"]
        self.componentDelimiter=conf["RULE_COMPONENT_DELIMITER"]
        self.itemSeparator=conf["RULE_ITEM_SEPARATOR"]
        self.confidenceThreshold=float(conf["CONFIDENCE_THRESHOLD"])
        self.registry=HelperFileStore(conf["TMP_FILE_PATH"]).loadRegistry()
        self.resultMap={}

    def reduce(self,key,values,context:TaskContext):
        if len(values)>1:
            context.increment(Counters.DUPLICATE_RULES,len(values)-1)
        self.resultMap[key]=values[0]

    def translate(self,key):
        comps=[]
        for comp in key.split(self.componentDelimiter):
            names=self.registry.translate(parseKey(comp,self.separator))
            comps.append("{"+self.itemSeparator.join(names)+"}")
        return self.componentDelimiter.join(comps)

    def cleanup(self,context:TaskContext):
        for key,confidence in sortMapByValues(self.resultMap):
            if confidence>=self.confidenceThreshold:
                context.write(self.translate(key),confidence)
                context.increment(Counters.RANKED_RULES)
            else:
                context.increment(Counters.BELOW_THRESHOLD)

        logger.info("number of distinct rules = {}".format(len(self.resultMap)))
        self.resultMap=None
